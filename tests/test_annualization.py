from datetime import date
from decimal import Decimal

from models.frequency import Frequency
from models.plan import InsurancePlan
from services.annualization import annualize, total_annual_premium

TODAY = date(2026, 10, 18)


def test_annualize_fixed_periods():
    assert annualize(100, Frequency.monthly()) == Decimal(1200)
    assert annualize(100, Frequency.quarterly()) == Decimal(400)
    assert annualize(100, Frequency.half_yearly()) == Decimal(200)
    assert annualize(100, Frequency.yearly()) == Decimal(100)


def test_annualize_custom():
    assert annualize(100, Frequency.custom(10)) == Decimal(3650)


def test_annualize_keeps_decimal_precision():
    assert annualize(0.1, Frequency.monthly()) == Decimal("1.2")


def test_annualize_zero():
    for frequency in (Frequency.monthly(), Frequency.yearly(), Frequency.custom(7)):
        assert annualize(0, frequency) == 0


def test_total_annual_premium_skips_expired_and_invalid():
    plans = [
        InsurancePlan(1, "Term", 1_000_000, 1000, "monthly"),
        InsurancePlan(2, "Health", 500_000, 2000, "half_yearly", expiry_date=date(2030, 1, 1)),
        InsurancePlan(3, "Old", 100_000, 9999, "yearly", expiry_date=date(2026, 1, 1)),
        InsurancePlan(4, "Broken", 100_000, 9999, "custom"),
    ]
    assert total_annual_premium(plans, TODAY) == Decimal(16000)
