"""
PURPOSE: Error taxonomy for the GH Paylink relay.

Each error carries the HTTP status it maps to and a message that is safe to
return to the caller. Route handlers raise them; the application-level
exception handler in paylink.main turns them into JSON responses.

Normalization errors are the exception to that rule: the webhook route
acknowledges them with 200 so the gateway does not keep redelivering a
payload that will never parse, and reports them on the defect log instead.
"""

from typing import Any, Optional, Sequence


class PaylinkError(Exception):
    """Base class for all errors raised by the relay."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, detail: Any = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.detail is not None:
            body["error"] = self.detail
        return body


class PaymentValidationError(PaylinkError):
    """Client payment request is missing or has invalid fields."""

    status_code = 400
    message = "All fields are required"


class SignatureError(PaylinkError):
    """Webhook signature did not match the configured secret."""

    status_code = 401
    message = "Invalid signature"


class NormalizationError(PaylinkError):
    """Webhook payload could not be turned into a transaction record."""

    status_code = 200
    message = "Webhook payload could not be normalized"


class MalformedPayloadError(NormalizationError):
    """Webhook body is not a JSON object or holds values that cannot be stored."""

    message = "Webhook payload is not a JSON object"


class MissingRequiredFieldError(NormalizationError):
    """A successful-payment payload lacks fields needed to persist it."""

    message = "Webhook payload is missing required fields"

    def __init__(self, fields: Sequence[str], tx_ref: Optional[str] = None) -> None:
        self.fields = list(fields)
        self.tx_ref = tx_ref
        super().__init__(
            f"Webhook payload is missing required fields: {', '.join(self.fields)}",
            detail={"missing": self.fields},
        )


class GatewayCallError(PaylinkError):
    """Outbound call to the payment gateway failed."""

    status_code = 500
    message = "Payment initiation failed"


class StorageError(PaylinkError):
    """Datastore is unavailable or a read/write failed."""

    status_code = 500
    message = "Storage unavailable"
