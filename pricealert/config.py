import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from pricescrape.selection import SelectionPolicy


class Settings(BaseModel):
    env: str = Field(default="local", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    fetch_timeout: float = Field(default=15, gt=0, alias="FETCH_TIMEOUT")
    specialized_fetch_timeout: float = Field(default=20, gt=0, alias="SPECIALIZED_FETCH_TIMEOUT")
    fetch_retry_delay: float = Field(default=1.0, ge=0, alias="FETCH_RETRY_DELAY")
    prefer_second_for_electronics: bool = Field(default=True, alias="PREFER_SECOND_FOR_ELECTRONICS")

    default_check_interval: int = Field(default=86400, gt=0, alias="DEFAULT_CHECK_INTERVAL")

    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    email_user: Optional[str] = Field(default=None, alias="EMAIL_USER")
    email_pass: Optional[str] = Field(default=None, alias="EMAIL_PASS")
    email_from_name: str = Field(default="Price Drop Alert", alias="EMAIL_FROM_NAME")

    model_config = {"populate_by_name": True}

    def selection_policy(self) -> SelectionPolicy:
        return SelectionPolicy(prefer_second_for_electronics=self.prefer_second_for_electronics)

    def extract_kwargs(self) -> dict:
        """Keyword arguments threaded into pricescrape.extract_product."""
        return {
            "policy": self.selection_policy(),
            "timeout": self.fetch_timeout,
            "specialized_timeout": self.specialized_fetch_timeout,
            "retry_delay": self.fetch_retry_delay,
        }


def _load_dotenv():
    # Load from repo root if present, otherwise rely on environment variables.
    root_env = Path(__file__).resolve().parents[1] / ".env"
    if root_env.exists():
        load_dotenv(root_env)
    else:
        load_dotenv()


@lru_cache()
def get_settings() -> Settings:
    _load_dotenv()
    try:
        return Settings(**os.environ)
    except ValidationError as exc:
        bad = [str(e["loc"][0]) for e in exc.errors()]
        detail = f"Invalid environment variables: {', '.join(bad)}"
        raise RuntimeError(detail) from exc
