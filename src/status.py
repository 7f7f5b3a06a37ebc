import json
from typing import Any, Dict, Optional

from gatewayapi import (
    MalformedToken,
    MissingClaims,
    MissingSignature,
    SignatureMismatch,
    verify,
)
from gatewayapi.logger import get_logger, log
from gatewayapi.secrets import get_webhook_secret

logger = get_logger("gatewayapi-status")

# Resolved once per container, on first request
_secret: Optional[str] = None


def _load_secret() -> str:
    global _secret
    if _secret is None:
        _secret = get_webhook_secret()
    return _secret


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def lambda_handler(event, context):
    request_id = getattr(context, "aws_request_id", None)

    try:
        secret = _load_secret()
    except RuntimeError as e:
        # Misconfiguration is a 500, not a 4xx
        logger.error("gatewayapi.env_error", extra={"fields": {"error": str(e), "request_id": request_id}})
        return _response(500, {"error": "server_misconfigured"})

    try:
        notification = verify(event, secret)
    except (MissingSignature, SignatureMismatch) as e:
        logger.warning(
            "gatewayapi.unauthorized",
            extra={"fields": {"error": str(e), "request_id": request_id}},
        )
        return _response(401, {"error": "unauthorized"})
    except (MalformedToken, MissingClaims) as e:
        logger.warning(
            "gatewayapi.invalid_notification",
            extra={"fields": {"error": str(e), "request_id": request_id}},
        )
        return _response(400, {"error": "invalid_notification"})

    log("gatewayapi.status", request_id=request_id, **notification.to_dict())

    return _response(
        200,
        {"ok": True, "message_id": notification.message_id, "status": notification.status},
    )
