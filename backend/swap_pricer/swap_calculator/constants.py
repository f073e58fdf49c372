# backend/swap_pricer/swap_calculator/constants.py
from enum import Enum

# Leg rate types
class LegType(str, Enum):
    FIXED = "Fixed"
    FLOATING = "Floating"

# Payment frequencies offered on the pricing form
class PaymentFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMIANNUAL = "Semi-Annual"
    ANNUAL = "Annual"

# Day count labels; stored on the leg, not used by the generator
class DayCountConvention(str, Enum):
    ACT_365 = "Actual/365"
    ACT_360 = "Actual/360"
    THIRTY_360 = "30/360"

class DealStatus(str, Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    MATURED = "Matured"

# Mapping of frequency labels to month periods
FREQUENCY_MONTHS = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
    PaymentFrequency.SEMIANNUAL: 6,
    PaymentFrequency.ANNUAL: 12,
}

# Used when the frequency label is not recognised
DEFAULT_FREQUENCY_MONTHS = 3

# Flat annual discount rate applied to every period
FLAT_DISCOUNT_RATE = 0.04

# Max jitter, in percentage points, applied to floating rates each period
FLOATING_RATE_JITTER = 0.25

# Tenor multipliers for the indicative curve series: (tenor, leg 1, leg 2)
INDICATIVE_CURVE_POINTS = [
    ("1Y", 0.90, 0.95),
    ("2Y", 0.95, 0.98),
    ("3Y", 1.00, 1.02),
    ("4Y", 1.08, 1.05),
    ("5Y", 1.15, 1.10),
]

DEAL_ID_PREFIX = "SWP"
