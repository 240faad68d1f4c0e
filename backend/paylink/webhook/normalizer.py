"""
PURPOSE: Normalize Flutterwave webhook payloads into TransactionRecords.

The gateway's payload schema has changed across API versions: v3 wraps the
charge under "data" next to an "event" field, older integrations post the
charge fields at the top level, and field names vary in case and spelling.
Each field therefore has an explicit, priority-ordered list of alias paths;
the first alias holding a non-empty value wins.

Pure transformation: no network or storage access.

CALLED BY:
    - paylink/webhook/ingestion.py (IngestionController.ingest)
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from paylink.config.constants import (
    DEFAULT_CURRENCY,
    MAX_AMOUNT,
    MAX_TX_REF_LENGTH,
    SYNTHETIC_REF_PREFIX,
    TransactionStatus,
)
from paylink.core.errors import MalformedPayloadError, MissingRequiredFieldError
from paylink.schemas.transaction import CustomerInfo, TransactionRecord

# An alias path is a sequence of keys walked from the transaction body
AliasPath = tuple[str, ...]

# ════════════════════════════════════════════════════════════════
# Field Aliases (highest priority first)
# ════════════════════════════════════════════════════════════════

TX_REF_ALIASES: tuple[AliasPath, ...] = (("tx_ref",), ("txref",), ("txRef",))
GATEWAY_REF_ALIASES: tuple[AliasPath, ...] = (("flw_ref",), ("flwref",), ("flwRef",))
AMOUNT_ALIASES: tuple[AliasPath, ...] = (("amount",), ("charged_amount",))
CHARGED_AMOUNT_ALIASES: tuple[AliasPath, ...] = (("charged_amount",),)
CURRENCY_ALIASES: tuple[AliasPath, ...] = (("currency",),)
STATUS_ALIASES: tuple[AliasPath, ...] = (("status",),)
PAYMENT_TYPE_ALIASES: tuple[AliasPath, ...] = (("payment_type",), ("paymentType",))
PROCESSOR_RESPONSE_ALIASES: tuple[AliasPath, ...] = (
    ("processor_response",),
    ("processorResponse",),
)
CREATED_AT_ALIASES: tuple[AliasPath, ...] = (("created_at",), ("createdAt",))
EVENT_TYPE_ALIASES: tuple[AliasPath, ...] = (("event",), ("event.type",), ("event_type",))

CUSTOMER_ID_ALIASES: tuple[AliasPath, ...] = (("customer", "id"), ("customer_id",))
CUSTOMER_NAME_ALIASES: tuple[AliasPath, ...] = (
    ("customer", "name"),
    ("customer", "fullname"),
    ("customer_name",),
)
CUSTOMER_EMAIL_ALIASES: tuple[AliasPath, ...] = (("customer", "email"), ("customer_email",))
CUSTOMER_PHONE_ALIASES: tuple[AliasPath, ...] = (
    ("customer", "phone_number"),
    ("customer", "phone"),
    ("customer_phone",),
)

# ════════════════════════════════════════════════════════════════
# Classification
# ════════════════════════════════════════════════════════════════

SUCCESSFUL_STATUS_TOKEN = "successful"

# Substrings of an event type that mark a completed charge
COMPLETED_EVENT_INDICATORS = ("charge", "completed")

_STATUS_MAP: dict[str, TransactionStatus] = {
    "successful": TransactionStatus.SUCCESSFUL,
    "success": TransactionStatus.SUCCESSFUL,
    "completed": TransactionStatus.SUCCESSFUL,
    "pending": TransactionStatus.PENDING,
    "processing": TransactionStatus.PENDING,
    "failed": TransactionStatus.FAILED,
    "cancelled": TransactionStatus.FAILED,
    "error": TransactionStatus.FAILED,
    "declined": TransactionStatus.FAILED,
}


def _resolve(source: dict, path: AliasPath) -> Any:
    value: Any = source
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def first_value(source: dict, aliases: Sequence[AliasPath]) -> Any:
    """Return the value at the first alias path that holds a non-empty value."""
    for path in aliases:
        value = _resolve(source, path)
        if not _is_blank(value):
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a numeric payload value, or None if it is not a finite number."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 payload timestamp into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offset pushes the instant outside the representable year range
        return None


def map_status(value: Any) -> TransactionStatus:
    if _is_blank(value):
        return TransactionStatus.UNKNOWN
    return _STATUS_MAP.get(str(value).strip().lower(), TransactionStatus.UNKNOWN)


class PayloadNormalizer:
    """
    PURPOSE: Turn a raw webhook body into a TransactionRecord.

    Attributes:
        default_currency: Currency recorded when the payload carries none.
    """

    def __init__(self, default_currency: str = DEFAULT_CURRENCY) -> None:
        self.default_currency = default_currency.upper()

    @staticmethod
    def transaction_body(payload: dict) -> dict:
        """Return the transaction fields, preferring the nested "data" object."""
        data = payload.get("data")
        return data if isinstance(data, dict) else payload

    @staticmethod
    def event_type(payload: dict) -> Optional[str]:
        """Return the event type, looking at the envelope before the data object."""
        value = first_value(payload, EVENT_TYPE_ALIASES)
        if value is None:
            data = payload.get("data")
            if isinstance(data, dict):
                value = first_value(data, EVENT_TYPE_ALIASES)
        return _as_text(value)

    def is_successful(self, payload: dict) -> bool:
        """
        PURPOSE: Classify a payload as a successful payment.

        A payload is successful when its status is "successful", or when its
        event type (case-insensitive) mentions a completed charge.
        """
        status = _as_text(first_value(self.transaction_body(payload), STATUS_ALIASES))
        if status is not None and status.lower() == SUCCESSFUL_STATUS_TOKEN:
            return True

        event_type = self.event_type(payload)
        if event_type is None:
            return False
        lowered = event_type.lower()
        return any(indicator in lowered for indicator in COMPLETED_EVENT_INDICATORS)

    def normalize(self, payload: Any, now: Optional[datetime] = None) -> Optional[TransactionRecord]:
        """
        PURPOSE: Extract the canonical transaction record from a webhook payload.

        Args:
            payload: Decoded JSON webhook body.
            now:     Ingestion time used when the payload has no valid timestamp.

        Returns:
            TransactionRecord for a successful payment, None for any other
            payload (acknowledged without persistence).

        Raises:
            MalformedPayloadError:     payload is not a JSON object, or its
                                       reference or amounts exceed the stored
                                       column bounds.
            MissingRequiredFieldError: successful payload without a derivable
                                       reference or amount.
        """
        if not isinstance(payload, dict):
            raise MalformedPayloadError()

        if not self.is_successful(payload):
            return None

        body = self.transaction_body(payload)

        gateway_ref = _as_text(first_value(body, GATEWAY_REF_ALIASES))
        tx_ref = _as_text(first_value(body, TX_REF_ALIASES))
        if tx_ref is None and gateway_ref is not None:
            tx_ref = f"{SYNTHETIC_REF_PREFIX}{gateway_ref}"

        amount = self._extract_amount(body)

        missing = []
        if tx_ref is None:
            missing.append("tx_ref")
        if amount is None:
            missing.append("amount")
        if missing:
            raise MissingRequiredFieldError(missing, tx_ref=tx_ref)

        charged_amount = parse_decimal(first_value(body, CHARGED_AMOUNT_ALIASES)) or Decimal("0")
        self._check_storable(tx_ref, amount, charged_amount)

        currency = _as_text(first_value(body, CURRENCY_ALIASES))
        raw_status = first_value(body, STATUS_ALIASES)
        status = TransactionStatus.SUCCESSFUL if _is_blank(raw_status) else map_status(raw_status)

        created_at = parse_timestamp(first_value(body, CREATED_AT_ALIASES))
        if created_at is None:
            created_at = now or datetime.now(timezone.utc)

        return TransactionRecord(
            tx_ref=tx_ref,
            gateway_ref=gateway_ref,
            amount=amount,
            charged_amount=charged_amount,
            currency=(currency or self.default_currency).upper(),
            status=status,
            payment_type=_as_text(first_value(body, PAYMENT_TYPE_ALIASES)),
            processor_response=_as_text(first_value(body, PROCESSOR_RESPONSE_ALIASES)),
            customer=CustomerInfo(
                id=_as_text(first_value(body, CUSTOMER_ID_ALIASES)),
                name=_as_text(first_value(body, CUSTOMER_NAME_ALIASES)),
                email=_as_text(first_value(body, CUSTOMER_EMAIL_ALIASES)),
                phone=_as_text(first_value(body, CUSTOMER_PHONE_ALIASES)),
            ),
            created_at=created_at,
            raw=payload,
        )

    @staticmethod
    def _extract_amount(body: dict) -> Optional[Decimal]:
        # First alias that parses wins; present-but-unparseable values count as 0
        present = False
        for path in AMOUNT_ALIASES:
            value = _resolve(body, path)
            if _is_blank(value):
                continue
            present = True
            parsed = parse_decimal(value)
            if parsed is not None:
                return parsed
        return Decimal("0") if present else None

    @staticmethod
    def _check_storable(tx_ref: str, amount: Decimal, charged_amount: Decimal) -> None:
        if len(tx_ref) > MAX_TX_REF_LENGTH:
            raise MalformedPayloadError(f"tx_ref exceeds {MAX_TX_REF_LENGTH} characters")
        for field, value in (("amount", amount), ("charged_amount", charged_amount)):
            if abs(value) > MAX_AMOUNT:
                raise MalformedPayloadError(f"{field} is out of range")
