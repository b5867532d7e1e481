"""Redirect Dispatcher - resolves tracking ids to their target URLs."""

from linktrace.tracking.store import SessionStore


class RedirectDispatcher:
    """Read-only lookup of a session's redirect target."""

    def __init__(self, store: SessionStore):
        self.store = store

    def resolve(self, session_id: str) -> str:
        """Return the target URL for ``session_id``.

        Raises:
            SessionNotFoundError: For unknown, expired and deleted ids alike.
        """
        return self.store.get(session_id).target_url
