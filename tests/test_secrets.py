import json

import pytest

from gatewayapi import secrets


class StubSecretsManager:
    def __init__(self, secret_string):
        self.secret_string = secret_string

    def get_secret_value(self, SecretId):
        return {"SecretString": self.secret_string}


class FakeBoto3:
    def __init__(self, client):
        self._client = client
        self.regions = []

    def client(self, name, region_name=None):
        assert name == "secretsmanager"
        self.regions.append(region_name)
        return self._client


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GATEWAYAPI_WEBHOOK_SECRET", raising=False)
    monkeypatch.delenv("GATEWAYAPI_SECRET_NAME", raising=False)
    monkeypatch.delenv("AWS_REGION", raising=False)


def _patch_boto3(monkeypatch, secret_string):
    fake = FakeBoto3(StubSecretsManager(secret_string))
    monkeypatch.setattr("gatewayapi.secrets.boto3", fake, raising=True)
    return fake


def test_env_secret_wins(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_WEBHOOK_SECRET", "from-env")
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    fake = _patch_boto3(monkeypatch, "from-secrets-manager")

    assert secrets.get_webhook_secret() == "from-env"
    assert fake.regions == []


def test_json_secret(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    monkeypatch.setenv("AWS_REGION", "eu-west-1")
    fake = _patch_boto3(monkeypatch, json.dumps({"webhook_secret": "s3cr3t", "api_token": "x"}))

    assert secrets.get_webhook_secret() == "s3cr3t"
    assert fake.regions == ["eu-west-1"]


def test_plain_text_secret_default_region(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    fake = _patch_boto3(monkeypatch, "plain-secret")

    assert secrets.get_webhook_secret() == "plain-secret"
    assert fake.regions == ["us-east-1"]


def test_json_secret_without_key(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, json.dumps({"api_token": "x"}))

    with pytest.raises(RuntimeError, match="webhook_secret"):
        secrets.get_webhook_secret()


def test_empty_secret_string(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, "")

    with pytest.raises(RuntimeError, match="no SecretString"):
        secrets.get_webhook_secret()


def test_nothing_configured():
    with pytest.raises(RuntimeError, match="GATEWAYAPI_WEBHOOK_SECRET"):
        secrets.get_webhook_secret()


@pytest.mark.parametrize("value", [12345, True, ["s3cr3t"], {"nested": "s3cr3t"}])
def test_json_secret_not_a_string(monkeypatch, value):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, json.dumps({"webhook_secret": value}))

    with pytest.raises(RuntimeError, match="webhook_secret"):
        secrets.get_webhook_secret()


def test_json_encoded_string_secret(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, json.dumps("abc"))

    assert secrets.get_webhook_secret() == "abc"


def test_json_encoded_empty_string_secret(monkeypatch):
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, '""')

    with pytest.raises(RuntimeError, match="is empty"):
        secrets.get_webhook_secret()


def test_numeric_plain_text_secret(monkeypatch):
    # Valid JSON, but not an object: the raw text is the secret
    monkeypatch.setenv("GATEWAYAPI_SECRET_NAME", "gatewayapi/webhook")
    _patch_boto3(monkeypatch, "12345")

    assert secrets.get_webhook_secret() == "12345"
