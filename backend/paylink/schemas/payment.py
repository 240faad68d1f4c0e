"""
Payment initiation schemas for the GH Paylink API.

The frontend posts {name, email, amount}. Missing fields are reported with
the relay's own 400 body rather than FastAPI's 422, so the request body is
validated here instead of by the route signature.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict

from paylink.core.errors import PaymentValidationError

_REQUIRED_FIELDS = ("name", "email", "amount")


class PaymentRequest(BaseModel):
    """
    Validated payment request.

    Attributes:
        name: Customer display name
        email: Customer email, forwarded to the gateway checkout
        amount: Requested amount in the default currency
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str
    email: str
    amount: Decimal

    @classmethod
    def from_body(cls, body: Any) -> "PaymentRequest":
        """
        Build a request from a decoded JSON body.

        Raises:
            PaymentValidationError: If a field is missing or empty, or the
                amount is not a positive number.
        """
        if not isinstance(body, dict):
            raise PaymentValidationError()

        missing = [
            field for field in _REQUIRED_FIELDS
            if body.get(field) is None or str(body.get(field)).strip() == ""
        ]
        if missing:
            raise PaymentValidationError(detail={"missing": missing})

        raw_amount = body["amount"]
        if isinstance(raw_amount, bool):
            raise PaymentValidationError("amount must be a positive number")
        try:
            amount = Decimal(str(raw_amount).strip())
        except InvalidOperation:
            raise PaymentValidationError("amount must be a positive number")
        if not amount.is_finite() or amount <= 0:
            raise PaymentValidationError("amount must be a positive number")

        return cls(name=str(body["name"]), email=str(body["email"]), amount=amount)
