from .loop import ChatSession, SessionResult
from .opener import open_file

__all__ = ["ChatSession", "SessionResult", "open_file"]
