from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..common.validators import digits_only
from ..core.constants import DEFAULT_YEAR_PREFIX, ROLL_LENGTH
from ..core.enums import Branch
from ..core.exceptions import NotFoundError
from .model import PinQuery, User
from .repository import UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    query: PinQuery
    student: Optional[User]
    # True when the identifier changed while the lookup was in flight.
    stale: bool = False


class IdentityResolver:
    """Resolve the student being typed at one kiosk.

    The roll number is looked up only once it reaches its full length. Every
    update bumps a generation counter, and a lookup that finishes after a
    newer update is discarded (last request wins).
    """

    def __init__(
        self,
        directory: UserDirectory,
        *,
        year_prefix: str = DEFAULT_YEAR_PREFIX,
        branch: str = Branch.EC.value,
        roll_length: int = ROLL_LENGTH,
    ):
        self._directory = directory
        self._roll_length = int(roll_length)
        self._lock = threading.Lock()
        self._generation = 0
        self._query = PinQuery(year_prefix=year_prefix, branch=branch, roll_fragment="")
        self._current: Optional[User] = None

    @property
    def query(self) -> PinQuery:
        return self._query

    @property
    def current(self) -> Optional[User]:
        return self._current

    def change_branch(self, branch: str) -> PinQuery:
        with self._lock:
            self._generation += 1
            self._query = PinQuery(self._query.year_prefix, branch.upper(), "")
            self._current = None
            return self._query

    def update(self, query: PinQuery) -> Resolution:
        query = self.normalize(query)
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._query = query
            self._current = None

        if len(query.roll_fragment) < self._roll_length:
            return Resolution(query=query, student=None)

        student = self.resolve(query)

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale lookup for %s", query.compose())
                return Resolution(query=query, student=None, stale=True)
            self._current = student
        return Resolution(query=query, student=student)

    def normalize(self, query: PinQuery) -> PinQuery:
        return PinQuery(
            year_prefix=(query.year_prefix or DEFAULT_YEAR_PREFIX).strip(),
            branch=(query.branch or "").strip().upper(),
            roll_fragment=digits_only(query.roll_fragment, max_len=self._roll_length),
        )

    def resolve(self, query: PinQuery) -> Optional[User]:
        """One-shot lookup of a complete PIN. A miss is simply None."""
        query = self.normalize(query)
        if len(query.roll_fragment) < self._roll_length:
            return None
        try:
            user = self._directory.get_by_pin(query.compose())
        except NotFoundError:
            user = None
        if user is None or not user.is_student:
            return None
        return user


class ResolverPool:
    """One resolver per kiosk, created on first use."""

    def __init__(self, directory: UserDirectory, *, year_prefix: str = DEFAULT_YEAR_PREFIX):
        self._directory = directory
        self._year_prefix = year_prefix
        self._lock = threading.Lock()
        self._resolvers: dict[str, IdentityResolver] = {}

    def get(self, kiosk_id: str) -> IdentityResolver:
        with self._lock:
            resolver = self._resolvers.get(kiosk_id)
            if resolver is None:
                resolver = IdentityResolver(self._directory, year_prefix=self._year_prefix)
                self._resolvers[kiosk_id] = resolver
            return resolver
