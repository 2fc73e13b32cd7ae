import pytest

from src.mira_attendance.mira_attendance.common.validators import digits_only, is_valid_email, require_float
from src.mira_attendance.mira_attendance.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "value, expected",
    [("a@b.c", True), ("parent.kavya@email.com", True), ("no-at-sign", False), ("a @b.c", False), ("", False), (None, False)],
)
def test_is_valid_email(value, expected):
    assert is_valid_email(value) is expected


def test_digits_only_truncates():
    assert digits_only("1a2b3c4", max_len=3) == "123"
    assert digits_only(None, max_len=3) == ""


def test_digits_only_ignores_non_ascii_digits():
    # Arabic-Indic and superscript digits would not compose a real PIN.
    assert digits_only("\u0661\u0662\u00b3", max_len=3) == ""
    assert digits_only("0\u06610\u00b31", max_len=3) == "001"


def test_require_float():
    assert require_float("18.45", "latitude") == 18.45
    with pytest.raises(ValidationError):
        require_float(None, "latitude")


@pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan")])
def test_require_float_rejects_non_finite(value):
    with pytest.raises(ValidationError):
        require_float(value, "latitude")
