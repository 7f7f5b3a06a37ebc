"""
GatewayAPI SMS Webhooks
=======================

Verification of GatewayAPI delivery-status webhooks. GatewayAPI signs each
notification as an HS256 JWT in the X-Gwapi-Signature header; `verify` checks
the signature and returns a read-only DeliveryStatusNotification.

Modules under this package:
- webhook.py     → verify(), DeliveryStatusNotification, status enumerations
- exceptions.py  → WebhookError and its subclasses
- logger.py      → structured JSON logging (used by the Lambda handlers)
- secrets.py     → webhook secret from env or AWS Secrets Manager

The verifier is stateless, performs no I/O and never logs; it is safe to call
from any web framework's request handler.
"""

from gatewayapi.exceptions import (
    MalformedToken,
    MissingClaims,
    MissingSignature,
    SignatureMismatch,
    WebhookError,
)
from gatewayapi.webhook import (
    SIGNATURE_HEADER,
    ChargeStatus,
    DeliveryStatus,
    DeliveryStatusNotification,
    verify,
)

__version__ = "1.0.0"

__all__ = [
    "ChargeStatus",
    "DeliveryStatus",
    "DeliveryStatusNotification",
    "MalformedToken",
    "MissingClaims",
    "MissingSignature",
    "SIGNATURE_HEADER",
    "SignatureMismatch",
    "WebhookError",
    "verify",
    "__version__",
]
