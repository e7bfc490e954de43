"""
API types — remote errors and payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

# ═══════════════════════════════════════════════════════════════════════════════
# Json — raw decoded body
# ═══════════════════════════════════════════════════════════════════════════════

type Json = Any
"""Decoded response body (dict, list, str or None)."""

# ═══════════════════════════════════════════════════════════════════════════════
# Api Error
# ═══════════════════════════════════════════════════════════════════════════════


class ApiErrorKind(Enum):
    """Kinds of remote failures."""

    NETWORK = auto()  # Connection refused, reset, timed out
    UNAUTHORIZED = auto()  # 401/403 from the gateway
    HTTP = auto()  # Any other non-2xx status
    CONTRACT = auto()  # Response body missing expected fields


@dataclass(frozen=True, slots=True)
class ApiError:
    """
    Remote call failure.

    message is short and safe to show to the shopper.
    detail holds diagnostics (status line, raw body) and is only logged.
    """

    kind: ApiErrorKind
    message: str
    status: int | None = None
    detail: str | None = None

    @property
    def is_unauthorized(self) -> bool:
        return self.kind == ApiErrorKind.UNAUTHORIZED

    @property
    def is_contract(self) -> bool:
        return self.kind == ApiErrorKind.CONTRACT


class ApiErrors:
    @staticmethod
    def network(detail: str) -> ApiError:
        return ApiError(ApiErrorKind.NETWORK, "Network error, please try again", detail=detail)

    @staticmethod
    def unauthorized(status: int, detail: str | None = None) -> ApiError:
        return ApiError(ApiErrorKind.UNAUTHORIZED, "Not authorized", status, detail)

    @staticmethod
    def http(status: int, detail: str | None = None) -> ApiError:
        return ApiError(ApiErrorKind.HTTP, "Service error, please try again", status, detail)

    @staticmethod
    def contract(message: str, detail: str | None = None) -> ApiError:
        return ApiError(ApiErrorKind.CONTRACT, message, detail=detail)


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Intent
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentIntent:
    """Processor handle for an amount to charge."""

    client_secret: str
    payment_id: str | None = None
    status: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Json",
    "ApiErrorKind",
    "ApiError",
    "ApiErrors",
    "PaymentIntent",
)
