import pytest


@pytest.fixture
def generic_html():
    return """
    <html><head><title>Headphones | Shop</title></head>
    <body>
      <h1>Wireless Bluetooth Headphone</h1>
      <div class="price">₹9,490</div>
    </body></html>
    """


@pytest.fixture
def mrp_html():
    return """
    <html><body>
      <h1>Gaming Mouse</h1>
      <div class="product-info"><span>MRP: <span class="price">₹2,999</span></span></div>
      <div class="offer"><span class="price">₹1,499</span></div>
    </body></html>
    """


@pytest.fixture
def strike_html():
    return """
    <html><body>
      <h1>Desk Chair</h1>
      <div><del class="price">₹5,000</del> <span class="price">₹3,500</span></div>
    </body></html>
    """


@pytest.fixture
def ld_json_html():
    return """
    <html><head>
      <script type="application/ld+json">
        {"@context": "https://schema.org", "@type": "Product", "name": "Desk Lamp",
         "offers": {"@type": "Offer", "price": "1299.00", "priceCurrency": "INR"}}
      </script>
    </head>
    <body><h1>Desk Lamp</h1><p>In stock</p></body></html>
    """


@pytest.fixture
def amazon_html():
    return """
    <html><body>
      <span id="productTitle">  Apple iPhone 15 (128 GB) - Black  </span>
      <div class="a-price"><span class="a-offscreen">₹69,900.00</span><span class="a-price-whole">69,900.</span></div>
    </body></html>
    """


@pytest.fixture
def flipkart_html():
    return """
    <html><body>
      <h1><span class="B_NuCI">SAMSUNG Galaxy S23 5G (Cream, 128 GB)</span></h1>
      <div class="_30jeq3 _16Jk6d">₹74,999</div>
      <div class="_3I9_wc _2p6lqe">₹95,999</div>
    </body></html>
    """


@pytest.fixture
def flipkart_class_scan_html():
    return """
    <html><body>
      <h1>Cotton Kurta</h1>
      <div class="xyz-price-box">Rs. 1,299</div>
    </body></html>
    """


@pytest.fixture
def flipkart_two_price_html():
    return """
    <html><body>
      <h1>Redmi Note 13 5G mobile</h1>
      <p>Price ₹20,999 now ₹17,999 with offer</p>
    </body></html>
    """
