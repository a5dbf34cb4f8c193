import pytest

from models.frequency import BUCKET_KINDS, Frequency
from utils.errors import InvalidFrequencyError


def test_custom_requires_positive_days():
    with pytest.raises(InvalidFrequencyError):
        Frequency("custom")
    with pytest.raises(InvalidFrequencyError):
        Frequency.custom(0)
    with pytest.raises(InvalidFrequencyError):
        Frequency.custom(-5)
    with pytest.raises(InvalidFrequencyError):
        Frequency.custom(True)


def test_fixed_kinds_reject_day_count():
    with pytest.raises(InvalidFrequencyError):
        Frequency("monthly", 30)


def test_unknown_kind_rejected():
    with pytest.raises(InvalidFrequencyError):
        Frequency("weekly")


def test_parse_wire_form():
    assert Frequency.parse("Quarterly", None) == Frequency.quarterly()
    assert Frequency.parse("custom", "45") == Frequency.custom(45)
    # the day count is ignored for fixed kinds
    assert Frequency.parse("yearly", 10) == Frequency.yearly()


def test_parse_respects_allowed_kinds():
    with pytest.raises(InvalidFrequencyError):
        Frequency.parse("half_yearly", allowed=BUCKET_KINDS)


def test_parse_missing_or_bad_custom_days():
    with pytest.raises(InvalidFrequencyError):
        Frequency.parse(None)
    with pytest.raises(InvalidFrequencyError):
        Frequency.parse("custom", "abc")
    with pytest.raises(InvalidFrequencyError):
        Frequency.parse("custom", None)


def test_labels():
    assert Frequency.monthly().label == "Monthly"
    assert Frequency.half_yearly().label == "Half Yearly"
    assert str(Frequency.custom(10)) == "Every 10 days"


def test_invalid_frequency_is_a_value_error():
    with pytest.raises(ValueError):
        Frequency.custom(0)
