"""Learner-facing notices raised by the controller."""

from dataclasses import dataclass
from enum import Enum

from kidsjoy.services.base import FailureReason


class NoticeKind(Enum):
    """Notice categories, used by the presentation layer to pick a style."""

    INFO = "info"
    CREDENTIALS = "credentials"
    SAFETY = "safety"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class Notice:
    """A message for the learner.

    Attributes:
        kind: Notice category.
        key: Translation key of the message.
        message: Translated message text.
        operation: Operation that produced the notice ("expand", "image", ...).
    """

    kind: NoticeKind
    key: str
    message: str
    operation: str = ""


# Failure reason -> (notice kind, translation key)
FAILURE_NOTICES: dict[FailureReason, tuple[NoticeKind, str]] = {
    FailureReason.CREDENTIAL: (NoticeKind.CREDENTIALS, "errors.credentials"),
    FailureReason.SAFETY: (NoticeKind.SAFETY, "errors.safety"),
    FailureReason.TRANSIENT: (NoticeKind.TRANSIENT, "errors.transient"),
    FailureReason.NO_CONTENT: (NoticeKind.TRANSIENT, "errors.transient"),
}
