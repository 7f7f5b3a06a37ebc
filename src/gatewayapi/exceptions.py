from typing import Iterable, List


class WebhookError(Exception):
    """
    Base class for every delivery-status webhook failure.

    Catch this to handle all rejections uniformly; catch the subclasses when the
    HTTP response should differ (e.g. 401 for auth failures vs 400 for bad data).
    """


class MissingSignature(WebhookError):
    def __init__(self, message: str = "Missing webhook JWT header.") -> None:
        super().__init__(message)


class MalformedToken(WebhookError):
    def __init__(self, message: str = "Failed to parse webhook header as JWT.") -> None:
        super().__init__(message)


class SignatureMismatch(WebhookError):
    def __init__(self, message: str = "Webhook failed signature validation.") -> None:
        super().__init__(message)


class MissingClaims(WebhookError):
    """
    Raised when a verified token lacks one of the required claims.

    `present` holds the claim names that were in the payload, in payload order.
    """

    def __init__(self, present: Iterable[str]) -> None:
        self.present: List[str] = list(present)
        super().__init__(f"Webhook missing required keys. Got: {','.join(self.present)}")
