"""Core interfaces (Protocols) for external collaborators."""

from typing import Protocol

from klarity.core.types import SessionSnapshot


class SessionStore(Protocol):
    """Read access to the persisted user/session record."""

    async def load(self, telegram_id: str) -> SessionSnapshot | None:
        """Return persisted session fields for a user, or None if unknown.

        The snapshot seeds a new turn; ``session_id`` falls back to the
        Telegram ID when absent.
        """
        ...
