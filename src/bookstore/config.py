"""Application settings read from the environment.

Values come from process environment variables; a ``.env`` file in the working
directory is loaded first when present. Protean's own domain configuration
(providers, brokers, event store) is left to the framework.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    environment: str = "development"

    # Authentication (tokens are issued elsewhere; we only verify them)
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Payment gateway
    payment_gateway: str = "fake"
    paymob_api_key: str = ""
    paymob_integration_id: int = 0
    paymob_iframe_id: int = 0
    paymob_base_url: str = "https://accept.paymob.com/api"
    paymob_currency: str = "EGP"
    gateway_timeout_seconds: float = 10.0

    # Response cache
    cache_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    catalogue_cache_ttl: int = 60

    # Listings
    orders_page_size: int = 10

    # Logging
    log_dir: str = "logs"
    log_level: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            environment=(os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower(),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            payment_gateway=os.getenv("PAYMENT_GATEWAY", cls.payment_gateway).lower(),
            paymob_api_key=os.getenv("PAYMOB_API_KEY", ""),
            paymob_integration_id=_env_int("PAYMOB_INTEGRATION_ID", 0),
            paymob_iframe_id=_env_int("PAYMOB_IFRAME_ID", 0),
            paymob_base_url=os.getenv("PAYMOB_BASE_URL", cls.paymob_base_url).rstrip("/"),
            paymob_currency=os.getenv("PAYMOB_CURRENCY", cls.paymob_currency),
            gateway_timeout_seconds=_env_float("GATEWAY_TIMEOUT_SECONDS", cls.gateway_timeout_seconds),
            cache_backend=os.getenv("CACHE_BACKEND", cls.cache_backend).lower(),
            redis_url=os.getenv("REDIS_URL", cls.redis_url),
            catalogue_cache_ttl=_env_int("CATALOGUE_CACHE_TTL", cls.catalogue_cache_ttl),
            orders_page_size=_env_int("ORDERS_PAGE_SIZE", cls.orders_page_size),
            log_dir=os.getenv("LOG_DIR", cls.log_dir),
            log_level=os.getenv("LOG_LEVEL", "").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, read once from the environment."""
    return Settings.from_env()


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
