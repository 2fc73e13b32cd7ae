from dataclasses import replace

from src.mira_attendance.mira_attendance.users.model import PinQuery
from src.mira_attendance.mira_attendance.users.repository import InMemoryUserDirectory
from src.mira_attendance.mira_attendance.users.resolver import IdentityResolver, ResolverPool


def test_complete_pin_resolves_student(directory):
    resolver = IdentityResolver(directory)

    resolution = resolver.update(PinQuery("23210", "EC", "001"))

    assert resolution.student.name == "KUMMARI VAISHNAVI"
    assert not resolution.stale
    assert resolver.current == resolution.student


def test_partial_roll_does_not_look_up(directory):
    resolver = IdentityResolver(directory)

    resolution = resolver.update(PinQuery("23210", "EC", "00"))

    assert resolution.student is None
    assert resolver.current is None


def test_roll_is_reduced_to_three_digits(directory):
    resolver = IdentityResolver(directory)

    resolution = resolver.update(PinQuery("23210", "ec", "0a0-29"))

    assert resolution.query.roll_fragment == "002"
    assert resolution.query.compose() == "23210-EC-002"
    assert resolution.student.pin == "23210-EC-002"


def test_unknown_pin_is_a_miss_not_an_error(directory):
    resolver = IdentityResolver(directory)

    assert resolver.update(PinQuery("23210", "EC", "999")).student is None
    assert resolver.resolve(PinQuery("23210", "CS", "001")) is None


def test_non_student_is_not_resolved(students, faculty):
    lecturer = replace(faculty, pin="23210-EC-900")
    resolver = IdentityResolver(InMemoryUserDirectory([*students, lecturer]))

    assert resolver.resolve(PinQuery("23210", "EC", "900")) is None


def test_branch_change_clears_roll_and_student(directory):
    resolver = IdentityResolver(directory)
    resolver.update(PinQuery("23210", "EC", "001"))

    query = resolver.change_branch("cs")

    assert query == PinQuery("23210", "CS", "")
    assert resolver.current is None


class InterruptingDirectory(InMemoryUserDirectory):
    """Simulates the user typing again while a lookup is in flight."""

    def __init__(self, users, on_lookup):
        super().__init__(users)
        self._on_lookup = on_lookup

    def get_by_pin(self, pin):
        hook, self._on_lookup = self._on_lookup, None
        if hook is not None:
            hook()
        return super().get_by_pin(pin)


def test_superseded_lookup_is_discarded(students):
    resolver = None

    def type_more():
        resolver.update(PinQuery("23210", "EC", "00"))

    resolver = IdentityResolver(InterruptingDirectory(students, type_more))

    resolution = resolver.update(PinQuery("23210", "EC", "001"))

    assert resolution.stale
    assert resolution.student is None
    assert resolver.current is None
    assert resolver.query.roll_fragment == "00"


def test_last_request_wins(students):
    resolver = None

    def type_other():
        resolver.update(PinQuery("23210", "EC", "002"))

    resolver = IdentityResolver(InterruptingDirectory(students, type_other))

    first = resolver.update(PinQuery("23210", "EC", "001"))

    assert first.stale
    assert resolver.current.pin == "23210-EC-002"


def test_pool_keeps_one_resolver_per_kiosk(directory):
    pool = ResolverPool(directory)

    assert pool.get("gate-1") is pool.get("gate-1")
    assert pool.get("gate-1") is not pool.get("gate-2")
