"""
PURPOSE: Webhook signature verification for Flutterwave deliveries.

Flutterwave echoes the merchant's configured secret hash in the verif-hash
header. There is no HMAC over the body, so verification is an equality check
done in constant time.
"""

import hmac
from typing import Optional


def verify_signature(provided_signature: Optional[str], configured_secret: Optional[str]) -> bool:
    """
    PURPOSE: Check that a webhook carries the configured shared secret.

    CALLED BY: IngestionController.ingest before the body is parsed

    Args:
        provided_signature: Value of the verif-hash header, if any.
        configured_secret:  FLW_SECRET_HASH from settings, if any.

    Returns:
        bool: True iff both are present and equal. A missing secret fails closed.
    """
    if not provided_signature or not configured_secret:
        return False
    return hmac.compare_digest(
        provided_signature.encode("utf-8"),
        configured_secret.encode("utf-8"),
    )
