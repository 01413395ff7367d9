import pytest

from pricescrape.schema import SiteType
from pricescrape.simulate import (
    DEFAULT_RANGE,
    placeholder_title,
    product_id,
    simulated_price,
    simulated_range,
)


class TestProductId:
    def test_flipkart_pid_query(self):
        url = "https://www.flipkart.com/boat-rockerz/p/itm0abc?pid=ACCFZGAQJGYCYDRK"
        assert product_id(url, SiteType.FLIPKART) == "ACCFZGAQJGYCYDRK"

    def test_flipkart_path_id(self):
        url = "https://www.flipkart.com/boat-rockerz/p/itm0abc123"
        assert product_id(url, SiteType.FLIPKART) == "itm0abc123"

    def test_amazon_asin(self):
        url = "https://www.amazon.in/Apple-iPhone-15/dp/B0CHX1W1XY/ref=sr_1_1"
        assert product_id(url, SiteType.AMAZON) == "B0CHX1W1XY"

    def test_other_is_slug(self):
        assert product_id("https://shop.example.com/Items/Blue Lamp") == "shop.example.com-items-blue-lamp"


class TestSimulatedPrice:
    @pytest.mark.parametrize(
        "url,low,high",
        [
            ("https://shop.example.com/sony-headphone-wh1000", 1_000, 30_000),
            ("https://shop.example.com/redmi-mobile", 15_000, 80_000),
            ("https://shop.example.com/smart-tv-55", 15_000, 150_000),
            ("https://shop.example.com/gaming-laptop", 30_000, 200_000),
            ("https://shop.example.com/dslr-kit", 5_000, 100_000),
            ("https://shop.example.com/desk-lamp", 500, 50_000),
        ],
    )
    def test_in_category_range(self, url, low, high):
        assert simulated_range(url) == (low, high)
        assert low <= simulated_price(url) < high

    def test_headphone_is_not_a_phone(self):
        assert simulated_range("https://shop.example.com/headphone") == (1_000, 30_000)

    def test_deterministic(self):
        url = "https://www.flipkart.com/boat-rockerz-450-headphone/p/itm0abc?pid=ACCFZGAQJGYCYDRK"
        assert simulated_price(url, "ACCFZGAQJGYCYDRK") == simulated_price(url, "ACCFZGAQJGYCYDRK")

    def test_identifier_changes_price(self):
        url = "https://shop.example.com/desk-lamp"
        prices = {simulated_price(url, f"id-{i}") for i in range(10)}
        assert len(prices) > 1
        assert all(DEFAULT_RANGE[0] <= p < DEFAULT_RANGE[1] for p in prices)


class TestPlaceholderTitle:
    def test_amazon(self):
        url = "https://www.amazon.in/dp/B0CHX1W1XY"
        assert placeholder_title(url, SiteType.AMAZON) == "Amazon Product B0CHX1W1XY"

    def test_flipkart_slug(self):
        url = "https://www.flipkart.com/apple-iphone-15-128gb/p/itm6ac6485515ae4"
        assert placeholder_title(url, SiteType.FLIPKART) == "Apple Iphone 15 128GB"

    def test_flipkart_without_slug(self):
        assert placeholder_title("https://www.flipkart.com/search?q=x", SiteType.FLIPKART) == "Flipkart Product"

    def test_brand_and_category(self):
        url = "https://www.croma.com/samsung-galaxy-mobile-phone/p/123"
        assert placeholder_title(url) == "Samsung Mobile Phone"

    def test_domain_fallback(self):
        assert placeholder_title("https://www.somestore.com/item/42") == "Somestore Product"
