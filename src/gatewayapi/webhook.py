import json
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from jose import jwk, jws
from jose.backends.base import Key
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError, JWSError

from gatewayapi.exceptions import (
    MalformedToken,
    MissingClaims,
    MissingSignature,
    SignatureMismatch,
)

SIGNATURE_HEADER = "X-Gwapi-Signature"

# GatewayAPI only signs with HS256; anything else in the JWT header is rejected.
ALLOWED_ALGORITHMS = [ALGORITHMS.HS256]

REQUIRED_CLAIMS = ("id", "msisdn", "time", "status")

# Unpadded base64url; the signature segment is empty for alg "none"
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-]*\Z")


class DeliveryStatus(str, Enum):
    """
    Message status values documented by GatewayAPI.

    https://gatewayapi.com/docs/rest.html#delivery-status-notification
    """

    UNKNOWN = "UNKNOWN"
    SCHEDULED = "SCHEDULED"
    BUFFERED = "BUFFERED"
    EN_ROUTE = "ENROUTE"
    DELIVERED = "DELIVERED"
    EXPIRED = "EXPIRED"
    DELETED = "DELETED"
    UNDELIVERABLE = "UNDELIVERABLE"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    SKIPPED = "SKIPPED"


class ChargeStatus(str, Enum):
    NO_CHARGE = "NOCHARGE"
    AUTHORIZED = "AUTHORIZED"
    CANCELLED = "CANCELLED"
    CAPTURED = "CAPTURED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    REFUND_FAIL = "REFUND_FAIL"


@dataclass(frozen=True)
class DeliveryStatusNotification:
    """
    A verified delivery-status notification.

    `status` and `charge_status` hold whatever string the provider sent; compare
    them against DeliveryStatus / ChargeStatus members, which are str-valued.
    Optional fields are None when the claim was not in the token.
    """

    message_id: int
    phone_number: int
    timestamp: int
    status: str
    user_reference: Optional[str] = None
    charge_status: Optional[str] = None
    country_code: Optional[str] = None
    country_prefix: Optional[int] = None
    error_description: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def from_request(cls, request: Any, secret: Union[str, bytes]) -> "DeliveryStatusNotification":
        """
        Verify the X-Gwapi-Signature JWT on `request` and build a notification.

        `request` may be a framework request object exposing `.headers`, an
        API Gateway proxy event, or a plain mapping of headers.

        Raises MissingSignature, MalformedToken, SignatureMismatch or
        MissingClaims (all subclasses of WebhookError).
        """
        key = _hmac_key(secret)

        token = _header_line(request, SIGNATURE_HEADER)
        if not token:
            raise MissingSignature()

        claims = _verified_claims(token, key)

        if any(name not in claims for name in REQUIRED_CLAIMS):
            raise MissingClaims(claims.keys())

        return cls(
            message_id=_int_claim(claims, "id", required=True),
            phone_number=_int_claim(claims, "msisdn", required=True),
            timestamp=_int_claim(claims, "time", required=True),
            status=_str_claim(claims, "status", required=True),
            user_reference=_str_claim(claims, "userref"),
            charge_status=_str_claim(claims, "charge_status"),
            country_code=_str_claim(claims, "country_code"),
            country_prefix=_int_claim(claims, "country_prefix"),
            error_description=_str_claim(claims, "error"),
            error_code=_str_claim(claims, "code"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def verify(request: Any, secret: Union[str, bytes]) -> DeliveryStatusNotification:
    """
    Shorthand for DeliveryStatusNotification.from_request(request, secret).
    """
    return DeliveryStatusNotification.from_request(request, secret)


def _hmac_key(secret: Union[str, bytes]) -> Key:
    if not secret:
        raise ValueError("Webhook secret must not be empty")
    try:
        return jwk.construct(secret, ALGORITHMS.HS256)
    except JOSEError as e:
        raise ValueError(f"Unusable webhook secret: {e}") from e


def _header_line(request: Any, name: str) -> str:
    """
    Return the value of header `name` as a single stripped string ("" if absent).

    Lookup is case-insensitive. Multi-valued headers are joined with ", ".
    """
    headers = getattr(request, "headers", None)
    if headers is None and isinstance(request, Mapping):
        # API Gateway event ({"headers": {...}}) or a bare header mapping
        headers = request["headers"] if "headers" in request else request
    if not headers:
        return ""

    value = headers.get(name)
    if value is None:
        wanted = name.lower()
        for key, candidate in headers.items():
            if isinstance(key, str) and key.lower() == wanted:
                value = candidate
                break

    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        value = ", ".join(_decode_header(v) for v in value)
    return _decode_header(value).strip()


def _decode_header(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _verified_claims(token: str, key: Key) -> Dict[str, Any]:
    # Three segments exactly; the JWS loader tolerates extra dots in the payload.
    if token.count(".") != 2:
        raise MalformedToken()

    # python-jose drops characters outside the alphabet instead of failing
    if not all(_SEGMENT_RE.match(segment) for segment in token.split(".")):
        raise MalformedToken()

    try:
        header = jws.get_unverified_header(token)
    except JWSError as e:
        raise MalformedToken() from e

    if header.get("alg") not in ALLOWED_ALGORITHMS:
        raise SignatureMismatch(f"Webhook JWT uses disallowed algorithm: {header.get('alg')!r}")

    try:
        payload = jws.verify(token, key, ALLOWED_ALGORITHMS)
    except JWSError as e:
        raise SignatureMismatch() from e

    try:
        claims = json.loads(payload.decode("utf-8"))
    except ValueError as e:
        raise MalformedToken("Webhook JWT payload is not valid JSON.") from e

    if not isinstance(claims, dict):
        raise MalformedToken("Webhook JWT payload must be a JSON object.")

    return claims


def _int_claim(claims: Dict[str, Any], name: str, required: bool = False) -> Optional[int]:
    value = claims.get(name)
    if value is None:
        if required:
            raise MalformedToken(f"Webhook claim '{name}' must not be null.")
        return None

    # bool is an int subclass; never accept it as a number
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)

    raise MalformedToken(f"Webhook claim '{name}' must be an integer, got {type(value).__name__}.")


def _str_claim(claims: Dict[str, Any], name: str, required: bool = False) -> Optional[str]:
    value = claims.get(name)
    if value is None:
        if required:
            raise MalformedToken(f"Webhook claim '{name}' must not be null.")
        return None

    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)

    raise MalformedToken(f"Webhook claim '{name}' must be a string, got {type(value).__name__}.")
