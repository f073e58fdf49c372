from datetime import date
from typing import List, Optional
import calendar
import os
import random
from swap_pricer.swap_calculator.constants import (
    FREQUENCY_MONTHS,
    DEFAULT_FREQUENCY_MONTHS,
    FLAT_DISCOUNT_RATE,
    FLOATING_RATE_JITTER,
    LegType,
    PaymentFrequency,
)
from swap_pricer.swap_calculator.models import CashflowRow, SwapDeal, SwapLeg
from swap_pricer.utils.logger import get_logger, EventType, LogLevel

# Get parameters from environment variables
my_entity = os.environ.get('MY_ENTITY', 'Unknown')

logger = get_logger(__name__, entity=my_entity)

def get_frequency_months(frequency: Optional[str]) -> int:
    """Months between payments for a frequency label; unknown labels give 3."""
    try:
        return FREQUENCY_MONTHS[PaymentFrequency(frequency)]
    except ValueError:
        return DEFAULT_FREQUENCY_MONTHS

def _get_month_end_day(year: int, month: int) -> int:
    """Get the last day of the specified month."""
    return calendar.monthrange(year, month)[1]

def add_months(start_date: date, months: int) -> date:
    """Add a number of months to a date, handling month-end logic."""
    total = start_date.month - 1 + months
    new_year = start_date.year + total // 12
    new_month = total % 12 + 1

    # Handle month-end dates (e.g., Jan 31 + 1 month = Feb 28/29)
    current_day = min(start_date.day, _get_month_end_day(new_year, new_month))
    return date(new_year, new_month, current_day)

def scheduled_date(start_date: date, months: int) -> Optional[date]:
    """start + months, or None when that falls past the last representable year."""
    if start_date.year + (start_date.month - 1 + months) // 12 > date.max.year:
        return None
    return add_months(start_date, months)

def months_between(start_date: date, end_date: date) -> int:
    """Whole months n such that start + n months is still on or before end."""
    if end_date < start_date:
        return 0
    months = (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)
    if add_months(start_date, months) > end_date:
        months -= 1
    return months

def effective_rate(leg: SwapLeg, rng=None) -> float:
    """
    Rate applied to a leg for one period, as a percentage.

    Floating legs get a uniform jitter of up to FLOATING_RATE_JITTER
    points either side of the stated rate; fixed legs use it unchanged.
    """
    if leg.type != LegType.FLOATING.value:
        return leg.rate
    source = rng if rng is not None else random
    return leg.rate + source.uniform(-FLOATING_RATE_JITTER, FLOATING_RATE_JITTER)

def calculate_interest(notional: float, rate: float, time_fraction: float) -> float:
    """Simple interest for one period. ``rate`` is a percentage."""
    return notional * (rate / 100) * time_fraction

def discount_factor(period: int, time_fraction: float, annual_rate: float = FLAT_DISCOUNT_RATE) -> float:
    """Flat annually compounded discount factor at the end of ``period``."""
    return 1 / (1 + annual_rate) ** (period * time_fraction)

def generate_cashflows(deal: SwapDeal, rng: Optional[random.Random] = None) -> List[CashflowRow]:
    """
    Generate the coupon schedule and valuation rows for a deal.

    Leg 1's frequency drives the schedule for both legs. Payment dates are
    anchored on the start date, so each one is exactly ``k * step`` months
    after it. Pass a seeded ``random.Random`` as ``rng`` to make floating
    legs reproducible.

    Returns a list of CashflowRow, empty when the dates are missing or the
    first payment date falls after the end date.
    """
    try:
        logger.info(
            "Generating swap cashflows",
            event_type=EventType.SYSTEM_EVENT,
            tags=["swap", "cashflow", "calculation"],
            data={
                "start_date": str(deal.start_date),
                "end_date": str(deal.end_date),
                "leg1_type": deal.leg1.type,
                "leg2_type": deal.leg2.type,
                "frequency": deal.leg1.frequency,
                "seeded": rng is not None,
            },
        )

        rows: List[CashflowRow] = []
        if deal.start_date is None or deal.end_date is None:
            logger.warning(
                "Deal dates missing or unparseable, no cashflows generated",
                event_type=EventType.SYSTEM_EVENT,
                tags=["swap", "cashflow", "warning"],
            )
            return rows

        step_months = get_frequency_months(deal.leg1.frequency)
        time_fraction = step_months / 12

        period = 1
        payment_date = scheduled_date(deal.start_date, step_months)
        while payment_date is not None and payment_date <= deal.end_date:
            leg1_interest = calculate_interest(
                deal.leg1.notional, effective_rate(deal.leg1, rng), time_fraction
            )
            leg2_interest = calculate_interest(
                deal.leg2.notional, effective_rate(deal.leg2, rng), time_fraction
            )
            df = discount_factor(period, time_fraction)

            # PV nets leg 1 undiscounted against discounted leg 2, no FX conversion
            rows.append(CashflowRow(
                date=payment_date,
                leg1_flow=leg1_interest,
                leg2_flow=-leg2_interest,
                discount_factor=round(df, 4),
                present_value=round(abs(leg1_interest) - abs(leg2_interest) * df, 2),
            ))

            period += 1
            payment_date = scheduled_date(deal.start_date, period * step_months)

        logger.info(
            "Swap cashflows generated successfully",
            event_type=EventType.SYSTEM_EVENT,
            data={"rows": len(rows), "step_months": step_months},
            tags=["swap", "cashflow", "success"],
        )

        return rows

    except Exception as e:
        logger.log_exception(
            e,
            message="Error generating swap cashflows",
            level=LogLevel.ERROR,
            tags=["swap", "cashflow", "error"],
        )
        raise
