from datetime import date
from typing import Dict, List, Any, Optional
import math
import os
import random

from swap_pricer.config import settings
from swap_pricer.utils.logger import get_logger, EventType, LogLevel
from swap_pricer.swap_calculator.calculators import generate_cashflows
from swap_pricer.swap_calculator.constants import (
    DEAL_ID_PREFIX,
    DealStatus,
    INDICATIVE_CURVE_POINTS,
)
from swap_pricer.swap_calculator.models import CashflowRow, PricingResult, SwapDeal, SwapLeg

# Get parameters from environment variables
my_entity = os.environ.get('MY_ENTITY')

logger = get_logger(__name__, entity=my_entity)

def format_amount(amount: float, currency: str) -> str:
    """Format an amount as 'CCY 1,234.56'."""
    if math.isnan(amount):
        return f"{currency} NaN"
    if math.isinf(amount):
        return f"{currency} {'-' if amount < 0 else ''}Infinity"
    return f"{currency} {amount:,.2f}"

def build_pricing_result(
    deal: SwapDeal,
    cashflows: List[CashflowRow],
    reporting_currency: Optional[str] = None
) -> PricingResult:
    """
    Summarise generated rows into the figures shown on the results page.

    Per-leg NPVs are raw sums of each leg's flows, undiscounted. Spread is
    the absolute stated-rate difference in basis points, principal is leg 2's
    notional as entered.
    """
    currency = reporting_currency or settings.REPORTING_CURRENCY
    npv_total = sum(row.present_value for row in cashflows)
    leg1_sum = sum(row.leg1_flow for row in cashflows)
    leg2_sum = sum(row.leg2_flow for row in cashflows)

    return PricingResult(
        npv_total=npv_total,
        npv_total_formatted=format_amount(npv_total, currency),
        spread=abs(deal.leg1.rate - deal.leg2.rate) * 100,
        principal=deal.leg2.notional,
        leg1_npv=leg1_sum,
        leg2_npv=leg2_sum,
        cashflows=cashflows,
    )

def price_deal(deal: SwapDeal, rng: Optional[random.Random] = None) -> PricingResult:
    """Generate cashflows for a deal and summarise them."""
    try:
        logger.info(
            "Pricing swap deal",
            event_type=EventType.TRANSACTION,
            tags=["swap", "price", "request"],
            data={
                "deal_id": deal.id,
                "pair": f"{deal.leg1.currency}/{deal.leg2.currency}",
            },
        )

        cashflows = generate_cashflows(deal, rng=rng)
        result = build_pricing_result(deal, cashflows)

        logger.info(
            "Swap deal priced successfully",
            event_type=EventType.TRANSACTION,
            data={
                "deal_id": deal.id,
                "rows": len(cashflows),
                "npv_total": result.npv_total,
            },
            tags=["swap", "price", "success"],
        )

        return result
    except Exception as e:
        logger.log_exception(
            e,
            message="Error pricing swap deal",
            level=LogLevel.ERROR,
            tags=["swap", "price", "error"],
        )
        raise

def build_indicative_curves(deal: SwapDeal) -> List[Dict[str, Any]]:
    """Indicative 1Y-5Y rate points for both legs, scaled from the stated rates."""
    return [
        {
            "name": tenor,
            "leg1": deal.leg1.rate * leg1_factor,
            "leg2": deal.leg2.rate * leg2_factor,
        }
        for tenor, leg1_factor, leg2_factor in INDICATIVE_CURVE_POINTS
    ]

def _json_number(value: Any) -> Any:
    """NaN and infinities have no JSON form; send them as null."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value

def _json_safe(payload: Any) -> Any:
    if isinstance(payload, dict):
        return {key: _json_safe(value) for key, value in payload.items()}
    if isinstance(payload, list):
        return [_json_safe(value) for value in payload]
    return _json_number(payload)

def deal_payload(deal: SwapDeal) -> Dict[str, Any]:
    """A deal as JSON-ready camelCase fields, non-finite numbers as null."""
    return _json_safe(deal.to_dict())

def transform_output(
    deal: SwapDeal,
    result: PricingResult,
    curves: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Transform a pricing result into the response payload."""
    try:
        logger.info(
            "Transforming output data",
            event_type=EventType.SYSTEM_EVENT,
            tags=["swap", "transform", "output"],
            data={"deal_id": deal.id, "rows": len(result.cashflows)},
        )

        output = {
            "tradeInfo": deal.to_dict(),
            "summary": {
                "npvTotal": result.npv_total,
                "npvTotalFormatted": result.npv_total_formatted,
                "spread": result.spread,
                "principal": result.principal,
                "leg1Npv": result.leg1_npv,
                "leg2Npv": result.leg2_npv,
            },
            "cashflows": [row.to_dict() for row in result.cashflows],
            "curves": curves if curves is not None else build_indicative_curves(deal),
        }

        return _json_safe(output)
    except Exception as e:
        logger.log_exception(
            e,
            message="Error transforming output data",
            level=LogLevel.ERROR,
            tags=["swap", "transform", "error"],
        )
        raise

def sample_deals() -> List[SwapDeal]:
    """The portfolio shown on a fresh dashboard."""
    return [
        SwapDeal(
            id="SWP-001",
            status=DealStatus.ACTIVE.value,
            value_date=date(2024, 1, 1),
            start_date=date(2024, 1, 3),
            end_date=date(2025, 12, 31),
            leg1=SwapLeg("BRL", 5000000, 1.1, "Floating", "Quarterly", "Actual/365"),
            leg2=SwapLeg("USD", 1000000, 4.5, "Fixed", "Semi-Annual", "30/360"),
        ),
        SwapDeal(
            id="SWP-002",
            status=DealStatus.ACTIVE.value,
            value_date=date(2024, 2, 15),
            start_date=date(2024, 2, 17),
            end_date=date(2026, 6, 15),
            leg1=SwapLeg("EUR", 2500000, 0.5, "Floating", "Semi-Annual", "Actual/360"),
            leg2=SwapLeg("JPY", 350000000, 0.1, "Fixed", "Annual", "Actual/365"),
        ),
        SwapDeal(
            id="SWP-003",
            status=DealStatus.PENDING.value,
            value_date=date(2023, 8, 29),
            start_date=date(2023, 9, 1),
            end_date=date(2024, 9, 1),
            leg1=SwapLeg("GBP", 1000000, 1.5, "Fixed", "Annual", "Actual/365"),
            leg2=SwapLeg("AUD", 1800000, 3.2, "Floating", "Quarterly", "Actual/365"),
        ),
    ]

class DealBook:
    """In-memory portfolio of booked deals, newest first. Lives for the process only."""

    def __init__(self, deals: Optional[List[SwapDeal]] = None):
        self._deals: List[SwapDeal] = list(deals or [])

    def __len__(self) -> int:
        return len(self._deals)

    def next_id(self) -> str:
        return f"{DEAL_ID_PREFIX}-{len(self._deals) + 1:03d}"

    def add(self, deal: SwapDeal) -> SwapDeal:
        """Book a deal as Active under the next SWP id and return the booked copy."""
        booked = deal.with_booking(self.next_id(), DealStatus.ACTIVE.value)
        self._deals.insert(0, booked)

        logger.info(
            "Deal booked",
            event_type=EventType.TRANSACTION,
            data={"deal_id": booked.id, "deals": len(self._deals)},
            tags=["dealbook", "add", "success"],
        )
        return booked

    def list(self) -> List[SwapDeal]:
        return list(self._deals)

    def get(self, deal_id: str) -> Optional[SwapDeal]:
        for deal in self._deals:
            if deal.id == deal_id:
                return deal
        return None

    def search(self, text: Optional[str]) -> List[SwapDeal]:
        """Match by id, either currency, or the digits of either notional."""
        if not text or not text.strip():
            return self.list()
        needle = text.strip().lower()
        digits = needle.replace(",", "")

        def matches(deal: SwapDeal) -> bool:
            if deal.id and needle in deal.id.lower():
                return True
            for leg in (deal.leg1, deal.leg2):
                if needle in leg.currency.lower():
                    return True
                if digits.isdigit() and math.isfinite(leg.notional) and digits in f"{leg.notional:.0f}":
                    return True
            return False

        return [deal for deal in self._deals if matches(deal)]
