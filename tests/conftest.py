import base64
import json

import pytest
from jose import jwt

SECRET = "gwapi-test-secret"


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@pytest.fixture
def secret():
    return SECRET


@pytest.fixture
def claims():
    # Shape of a real GatewayAPI delivery-status notification
    return {
        "id": 1000001,
        "msisdn": 4512345678,
        "time": 1700000000,
        "status": "DELIVERED",
    }


@pytest.fixture
def sign():
    """
    Build a GatewayAPI-style HS256 JWT for the given claims.
    """

    def _sign(payload, secret=SECRET, algorithm="HS256"):
        return jwt.encode(payload, secret, algorithm=algorithm)

    return _sign


@pytest.fixture
def forge():
    """
    Assemble a token by hand, for headers/signatures jose refuses to produce.
    """

    def _forge(header, payload, signature=b""):
        return ".".join(
            [
                b64url(json.dumps(header).encode("utf-8")),
                b64url(json.dumps(payload).encode("utf-8")),
                b64url(signature),
            ]
        )

    return _forge


@pytest.fixture
def event():
    """
    Wrap a token in an API Gateway HTTP API (v2) event.
    API Gateway lower-cases header names.
    """

    def _event(token=None):
        headers = {"content-type": "application/json"}
        if token is not None:
            headers["x-gwapi-signature"] = token
        return {
            "version": "2.0",
            "rawPath": "/gatewayapi/status",
            "headers": headers,
            "requestContext": {"http": {"method": "POST"}},
            "body": "",
        }

    return _event
