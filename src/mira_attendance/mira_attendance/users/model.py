from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: campus user.

    Owned by the user-management side; the capture pipeline only reads it.
    """

    user_id: str
    pin: str
    name: str
    role: Role
    branch: str
    year: Optional[int] = None
    email: Optional[str] = None
    email_verified: bool = False
    parent_email: Optional[str] = None
    parent_email_verified: bool = False
    phone_number: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


@dataclass(frozen=True)
class PinQuery:
    """A PIN being typed at the kiosk: `<year>-<branch>-<roll>`."""

    year_prefix: str
    branch: str
    roll_fragment: str

    def compose(self) -> str:
        return f"{self.year_prefix}-{self.branch}-{self.roll_fragment}"


def user_to_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "pin": user.pin,
        "name": user.name,
        "role": user.role.value,
        "branch": user.branch,
        "year": user.year,
        "email": user.email,
        "email_verified": user.email_verified,
        "parent_email": user.parent_email,
        "parent_email_verified": user.parent_email_verified,
        "phone_number": user.phone_number,
        "image_url": user.image_url,
    }
