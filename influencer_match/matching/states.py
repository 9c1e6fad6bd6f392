"""Match page states.

A page is always in exactly one of these states; ``Loading`` is the only
one that moves on, the rest are terminal until the page is loaded again.
"""

from dataclasses import dataclass, field
from typing import Union

from ..storage.models import CreatorProfile, UserMatchRecord
from .presenter import render_creator


@dataclass(frozen=True)
class Authenticating:
    """No signed-in user yet."""

    state: str = field(default="authenticating", init=False)

    def to_dict(self) -> dict:
        return {"state": self.state, "creators": []}


@dataclass(frozen=True)
class Loading:
    user_id: str
    state: str = field(default="loading", init=False)

    def to_dict(self) -> dict:
        return {"state": self.state, "userId": self.user_id, "creators": []}


@dataclass(frozen=True)
class Empty:
    """The user has no stored match; top creators are shown instead."""

    user_id: str
    fallback_creators: list[CreatorProfile]
    state: str = field(default="empty", init=False)

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "userId": self.user_id,
            "match": None,
            "creators": [render_creator(c) for c in self.fallback_creators],
        }


@dataclass(frozen=True)
class Populated:
    user_id: str
    match: UserMatchRecord
    creators: list[CreatorProfile]
    state: str = field(default="populated", init=False)

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "userId": self.user_id,
            "match": self.match.to_api(),
            "creators": [render_creator(c) for c in self.creators],
        }


@dataclass(frozen=True)
class Failed:
    """Fetching failed; rendered as an empty result with a message."""

    user_id: str
    reason: str
    state: str = field(default="failed", init=False)

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "userId": self.user_id,
            "reason": self.reason,
            "creators": [],
        }


ViewState = Union[Authenticating, Loading, Empty, Populated, Failed]
