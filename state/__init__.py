"""Session state utilities."""

from .draft import DraftStore, FileDraftStore, SessionDraftStore

__all__ = ["DraftStore", "FileDraftStore", "SessionDraftStore"]
