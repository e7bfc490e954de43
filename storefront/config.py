"""Environment-driven configuration for the storefront core."""
from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

from storefront.log import get_environment

DEFAULT_CURRENCY = "usd"
DEFAULT_TIMEOUT = timedelta(seconds=30)


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Storefront settings. Immutable; with_* return modified copies.

    Example:
        settings = load_settings().with_timeout(timedelta(seconds=5))
    """

    gateway_url: str
    currency: str = DEFAULT_CURRENCY
    request_timeout: timedelta = DEFAULT_TIMEOUT
    environment: str = "development"

    def with_gateway_url(self, url: str) -> Settings:
        return dataclasses.replace(self, gateway_url=_normalise_url(url))

    def with_currency(self, currency: str) -> Settings:
        return dataclasses.replace(self, currency=_normalise_currency(currency))

    def with_timeout(self, timeout: timedelta) -> Settings:
        if timeout <= timedelta(0):
            raise ValueError("request timeout must be positive")
        return dataclasses.replace(self, request_timeout=timeout)

    @property
    def is_production(self) -> bool:
        return self.environment in ("production", "staging")


def _normalise_url(url: str) -> str:
    url = url.strip().rstrip("/")
    if not url:
        raise ValueError("gateway URL must not be empty")
    return url


def _normalise_currency(currency: str) -> str:
    currency = currency.strip().lower()
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"currency must be a 3-letter ISO code, got {currency!r}")
    return currency


def _gateway_url() -> str:
    url = os.getenv("STOREFRONT_GATEWAY_URL")
    if url:
        return url

    # Legacy frontend variable holds only a port on localhost
    port = os.getenv("VITE_GATEWAY_PORT")
    if port:
        if not port.isdigit():
            raise ValueError(f"VITE_GATEWAY_PORT must be a port number, got {port!r}")
        return f"http://localhost:{port}"

    raise ValueError("STOREFRONT_GATEWAY_URL environment variable is not set")


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    raw_timeout = os.getenv("STOREFRONT_TIMEOUT_SECONDS", "30")
    try:
        timeout = timedelta(seconds=float(raw_timeout))
    except ValueError as e:
        raise ValueError(f"STOREFRONT_TIMEOUT_SECONDS is not a number: {raw_timeout!r}") from e

    return (
        Settings(
            gateway_url=_normalise_url(_gateway_url()),
            environment=get_environment(),
        )
        .with_currency(os.getenv("STOREFRONT_CURRENCY", DEFAULT_CURRENCY))
        .with_timeout(timeout)
    )


__all__ = ("Settings", "load_settings", "DEFAULT_CURRENCY", "DEFAULT_TIMEOUT")
