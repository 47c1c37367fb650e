"""Classification of remote-capability failures."""

import logging

from google.genai import errors as genai_errors

from kidsjoy.services.base import FailureReason

logger = logging.getLogger(__name__)

_CREDENTIAL_CODES = {401, 403}
_CREDENTIAL_MARKERS = ("401", "403", "api key", "api_key", "permission_denied", "unauthenticated")
_SAFETY_MARKERS = ("safety", "blocked", "prohibited")


class MissingCredentialsError(RuntimeError):
    """Raised when a remote call is attempted without an API key."""

    def __init__(self) -> None:
        super().__init__("API_KEY_MISSING")


def classify_exception(exc: BaseException) -> FailureReason:
    """Classify an exception raised by a remote capability.

    Args:
        exc: The exception.

    Returns:
        CREDENTIAL for missing or rejected keys, SAFETY for content-policy
        refusals, TRANSIENT for everything else.
    """
    if isinstance(exc, MissingCredentialsError):
        return FailureReason.CREDENTIAL

    code = exc.code if isinstance(exc, genai_errors.APIError) else getattr(exc, "code", None)
    message = str(exc).lower()

    if code in _CREDENTIAL_CODES or any(marker in message for marker in _CREDENTIAL_MARKERS):
        return FailureReason.CREDENTIAL
    if any(marker in message for marker in _SAFETY_MARKERS):
        return FailureReason.SAFETY
    return FailureReason.TRANSIENT
