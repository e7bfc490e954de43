"""
Api — the remote storefront gateway.

    from storefront import api as A

    async with A.HttpApi("http://localhost:8080") as client:
        match await client.get_cart():
            case Ok(body):
                cart = A.parse_cart(body)
            case Error(e):
                log.warning("cart unavailable", kind=e.kind.name)

Calls return Result[Json, ApiError]; parse_* turn bodies into domain values
and report shape problems as ApiErrorKind.CONTRACT.
"""

from storefront.api._types import (
    Json,
    ApiErrorKind,
    ApiError,
    ApiErrors,
    PaymentIntent,
)
from storefront.api._client import Api, HttpApi, decode_body
from storefront.api._memory import MemoryApi, IntentRequest
from storefront.api._parse import (
    parse_identity,
    parse_line_item,
    parse_cart,
    parse_payment_intent,
    parse_product,
    parse_products,
)

__all__ = (
    # Types
    "Json",
    "ApiErrorKind",
    "ApiError",
    "ApiErrors",
    "PaymentIntent",
    # Clients
    "Api",
    "HttpApi",
    "MemoryApi",
    "IntentRequest",
    "decode_body",
    # Parsers
    "parse_identity",
    "parse_line_item",
    "parse_cart",
    "parse_payment_intent",
    "parse_product",
    "parse_products",
)
