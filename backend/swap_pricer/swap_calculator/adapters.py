# backend/swap_pricer/swap_calculator/adapters.py
from datetime import date, datetime
from typing import Dict, Any, Optional, Union
import math
from swap_pricer.swap_calculator.constants import (
    LegType,
    PaymentFrequency,
    DayCountConvention,
)
from swap_pricer.swap_calculator.models import SwapDeal, SwapLeg

DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%Y-%m-%dT%H:%M:%S")

def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Convert a form date to a date. Unparseable input gives None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None

def parse_amount(value: Union[str, float, int, None]) -> float:
    """
    Convert a notional or rate field to a float.

    Non-numeric input becomes NaN rather than an error, so it shows up
    in every figure computed from it.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace(",", "").replace("%", "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return math.nan
    return math.nan

def parse_leg_type(type_str: Optional[str]) -> str:
    """Convert a leg type label to Fixed or Floating."""
    if type_str and "float" in str(type_str).lower():
        return LegType.FLOATING.value
    return LegType.FIXED.value

def parse_frequency(frequency_str: Optional[str]) -> Optional[str]:
    """
    Convert a frequency label to its canonical form.

    Unknown labels are returned unchanged; the calculator falls back to
    quarterly for them.
    """
    if frequency_str is None:
        return None
    frequency_lower = str(frequency_str).lower().replace(" ", "")

    if "monthly" in frequency_lower:
        return PaymentFrequency.MONTHLY.value
    elif "quarter" in frequency_lower:
        return PaymentFrequency.QUARTERLY.value
    elif "semi" in frequency_lower:
        return PaymentFrequency.SEMIANNUAL.value
    elif "annual" in frequency_lower:
        return PaymentFrequency.ANNUAL.value

    return str(frequency_str)

def parse_date_basis(date_basis_str: Optional[str]) -> str:
    """Convert a day count label to a standardized format."""
    if not date_basis_str:
        return DayCountConvention.ACT_365.value
    date_basis_lower = str(date_basis_str).lower()

    if "actual/360" in date_basis_lower or "act/360" in date_basis_lower:
        return DayCountConvention.ACT_360.value
    elif "actual/365" in date_basis_lower or "act/365" in date_basis_lower:
        return DayCountConvention.ACT_365.value
    elif "30/360" in date_basis_lower:
        return DayCountConvention.THIRTY_360.value

    return str(date_basis_str)

def prepare_swap_leg(leg: Dict[str, Any]) -> SwapLeg:
    """Build a SwapLeg from a form leg section."""
    return SwapLeg(
        currency=str(leg.get("currency", "")).upper(),
        notional=parse_amount(leg.get("notional")),
        rate=parse_amount(leg.get("rate")),
        type=parse_leg_type(leg.get("type")),
        frequency=parse_frequency(leg.get("frequency")),
        convention=parse_date_basis(leg.get("convention")),
    )

def prepare_swap_deal(deal_json: Dict[str, Any]) -> SwapDeal:
    """Transform a pricing form payload into deal terms for the calculator."""
    return SwapDeal(
        value_date=parse_date(deal_json.get("valueDate")),
        start_date=parse_date(deal_json.get("startDate")),
        end_date=parse_date(deal_json.get("endDate")),
        leg1=prepare_swap_leg(deal_json.get("leg1") or {}),
        leg2=prepare_swap_leg(deal_json.get("leg2") or {}),
        id=deal_json.get("id"),
        status=deal_json.get("status"),
    )
