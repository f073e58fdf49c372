from datetime import date

import pytest

from swap_pricer.config import settings
from swap_pricer.swap_calculator.models import SwapDeal, SwapLeg


def make_leg(
    currency="USD",
    notional=1_000_000,
    rate=4.0,
    type="Fixed",
    frequency="Quarterly",
    convention="Actual/365",
):
    return SwapLeg(currency, notional, rate, type, frequency, convention)


def make_deal(start=date(2024, 10, 1), end=date(2025, 4, 1), leg1=None, leg2=None, **kwargs):
    return SwapDeal(
        value_date=kwargs.pop("value_date", date(2024, 9, 27)),
        start_date=start,
        end_date=end,
        leg1=leg1 or make_leg(),
        leg2=leg2 or make_leg(),
        **kwargs
    )


@pytest.fixture
def fixed_deal():
    return make_deal()


@pytest.fixture
def floating_deal():
    return make_deal(
        start=date(2024, 10, 1),
        end=date(2029, 10, 1),
        leg1=make_leg("BRL", 10_000_000, 1.25, "Floating", "Quarterly", "Actual/365"),
        leg2=make_leg("USD", 1_850_000, 3.75, "Fixed", "Semi-Annual", "30/360"),
    )


@pytest.fixture
def no_ai_keys(monkeypatch):
    for key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.setattr(settings, key, None)
    monkeypatch.setattr(settings, "DEFAULT_AI_PROVIDER", "OpenAI")
