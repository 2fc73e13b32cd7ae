from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserDirectory(Protocol):
    """Read-only view of the identity store.

    Note (DIP): the capture pipeline depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_pin(self, pin: str) -> Optional[User]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: Iterable[User] = ()):
        self._by_id: dict[str, User] = {}
        for u in users:
            self._by_id[u.user_id] = u

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_pin(self, pin: str) -> Optional[User]:
        wanted = (pin or "").upper()
        for u in self._by_id.values():
            if u.pin.upper() == wanted:
                return u
        return None

    def list_by_role(self, role: Role) -> Sequence[User]:
        return [u for u in self._by_id.values() if u.role == role]
