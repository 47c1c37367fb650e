"""Catalog controller and session state machine."""

from kidsjoy.controller.controller import CatalogController
from kidsjoy.controller.notices import Notice, NoticeKind
from kidsjoy.controller.session import ALPHABET, Direction, GameType, SessionState, View

__all__ = [
    "ALPHABET",
    "CatalogController",
    "Direction",
    "GameType",
    "Notice",
    "NoticeKind",
    "SessionState",
    "View",
]
