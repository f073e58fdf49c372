# backend/swap_pricer/swap_calculator/models.py
"""Value types shared by the calculator and the services."""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SwapLeg:
    """One side of the swap. ``rate`` is a percentage (4.0 means 4%)."""

    currency: str
    notional: float
    rate: float
    type: str
    frequency: str
    convention: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency,
            "notional": self.notional,
            "rate": self.rate,
            "type": self.type,
            "frequency": self.frequency,
            "convention": self.convention,
        }


@dataclass(frozen=True)
class SwapDeal:
    """
    Deal terms for one pricing request.

    Dates are ``None`` when the submitted value could not be parsed; the
    generator then produces no rows.
    """

    value_date: Optional[date]
    start_date: Optional[date]
    end_date: Optional[date]
    leg1: SwapLeg
    leg2: SwapLeg
    id: Optional[str] = None
    status: Optional[str] = None

    def with_booking(self, deal_id: str, status: str) -> "SwapDeal":
        return replace(self, id=deal_id, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "valueDate": _iso(self.value_date),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "leg1": self.leg1.to_dict(),
            "leg2": self.leg2.to_dict(),
        }


@dataclass(frozen=True)
class CashflowRow:
    """A single coupon period: both legs' flows, discount factor and PV."""

    date: date
    leg1_flow: float
    leg2_flow: float
    discount_factor: float
    present_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "leg1Flow": self.leg1_flow,
            "leg2Flow": self.leg2_flow,
            "discountFactor": self.discount_factor,
            "presentValue": self.present_value,
        }


@dataclass
class PricingResult:
    npv_total: float
    npv_total_formatted: str
    spread: float
    principal: float
    leg1_npv: float
    leg2_npv: float
    cashflows: List[CashflowRow] = field(default_factory=list)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None
