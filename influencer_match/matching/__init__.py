"""Match recording and retrieval"""

from .presenter import format_followers, render_creator
from .recorder import MatchRecorder, RecordResult
from .states import Authenticating, Empty, Failed, Loading, Populated, ViewState
from .viewer import MatchViewer

__all__ = [
    "MatchRecorder",
    "RecordResult",
    "MatchViewer",
    "ViewState",
    "Authenticating",
    "Loading",
    "Empty",
    "Populated",
    "Failed",
    "format_followers",
    "render_creator",
]
