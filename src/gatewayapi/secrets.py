import json
import os

import boto3

from gatewayapi.logger import get_logger

logger = get_logger("secrets")

SECRET_ENV_VAR = "GATEWAYAPI_WEBHOOK_SECRET"
SECRET_NAME_ENV_VAR = "GATEWAYAPI_SECRET_NAME"
SECRET_JSON_KEY = "webhook_secret"


def get_webhook_secret() -> str:
    """
    Resolve the shared secret GatewayAPI signs webhooks with.

    GATEWAYAPI_WEBHOOK_SECRET wins if set (local runs, tests). Otherwise the
    secret is read from AWS Secrets Manager under GATEWAYAPI_SECRET_NAME.

    Raises RuntimeError with a clear message if neither is configured.
    """
    secret = os.getenv(SECRET_ENV_VAR)
    if secret:
        return secret

    secret_name = os.getenv(SECRET_NAME_ENV_VAR)
    if not secret_name:
        msg = f"Missing required environment variables: {SECRET_ENV_VAR} or {SECRET_NAME_ENV_VAR}"
        logger.error(msg)
        raise RuntimeError(msg)

    return _fetch_from_secrets_manager(secret_name, os.getenv("AWS_REGION", "us-east-1"))


def _fetch_from_secrets_manager(secret_name: str, region_name: str) -> str:
    """
    The SecretString is either the raw webhook secret or a JSON object like:

        {"webhook_secret": "..."}
    """
    logger.info(
        "secrets.fetch",
        extra={"fields": {"secret_name": secret_name, "region": region_name}},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise RuntimeError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError:
        # Plain-text secret
        return secret_str

    if isinstance(data, str):
        # JSON-encoded string: "\"abc\""
        secret_str = data
    if not isinstance(data, dict):
        if not secret_str:
            msg = f"Secret '{secret_name}' is empty"
            logger.error(msg)
            raise RuntimeError(msg)
        return secret_str

    secret = data.get(SECRET_JSON_KEY)
    if not secret or not isinstance(secret, str):
        msg = f"Secret '{secret_name}' has no string '{SECRET_JSON_KEY}' field"
        logger.error(msg)
        raise RuntimeError(msg)

    return secret
