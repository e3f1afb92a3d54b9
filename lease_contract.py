# lease_contract.py

import math
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


class ValidationError(ValueError):
    """A lease contract field is missing or outside its allowed domain."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class PaymentFrequency(Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUAL = "SemiAnnual"
    ANNUAL = "Annual"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @property
    def months_per_period(self) -> int:
        return 12 // self.periods_per_year


_PERIODS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.QUARTERLY: 4,
    PaymentFrequency.SEMI_ANNUAL: 2,
    PaymentFrequency.ANNUAL: 1,
}


class PaymentTiming(Enum):
    ADVANCE = "Advance"
    ARREARS = "Arrears"


class EscalationType(Enum):
    NONE = "None"
    FIXED = "Fixed"
    CPI = "CPI"


# Labels seen in forms and spreadsheets, keyed by their squashed lower-case form
_ENUM_ALIASES = {
    PaymentFrequency: {
        "monthly": PaymentFrequency.MONTHLY,
        "month": PaymentFrequency.MONTHLY,
        "quarterly": PaymentFrequency.QUARTERLY,
        "quarter": PaymentFrequency.QUARTERLY,
        "semiannual": PaymentFrequency.SEMI_ANNUAL,
        "semiannually": PaymentFrequency.SEMI_ANNUAL,
        "halfyearly": PaymentFrequency.SEMI_ANNUAL,
        "annual": PaymentFrequency.ANNUAL,
        "annually": PaymentFrequency.ANNUAL,
        "yearly": PaymentFrequency.ANNUAL,
    },
    PaymentTiming: {
        "advance": PaymentTiming.ADVANCE,
        "inadvance": PaymentTiming.ADVANCE,
        "beginning": PaymentTiming.ADVANCE,
        "start": PaymentTiming.ADVANCE,
        "arrears": PaymentTiming.ARREARS,
        "inarrears": PaymentTiming.ARREARS,
        "end": PaymentTiming.ARREARS,
    },
    EscalationType: {
        "none": EscalationType.NONE,
        "fixed": EscalationType.FIXED,
        "cpi": EscalationType.CPI,
    },
}


def parse_enum(enum_cls, value, field: str):
    """Resolve an enum member from itself or one of its accepted labels."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = "".join(ch for ch in value.lower() if ch.isalnum())
        member = _ENUM_ALIASES[enum_cls].get(key)
        if member is not None:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValidationError(field, f"{value!r} is not one of {allowed}")


def _require_number(field: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValidationError(field, "must be a finite number")
    return float(value)


def _non_negative(field: str, value) -> float:
    number = _require_number(field, value)
    if number < 0:
        raise ValidationError(field, "cannot be negative")
    return number


REQUIRED_FIELDS = (
    "contract_id",
    "commencement_date",
    "non_cancellable_years",
    "fixed_payment_per_period",
    "ibr_annual",
)

@dataclass(frozen=True)
class LeaseContract:
    # Required; None defaults let a missing value surface as ValidationError
    contract_id: str = None
    commencement_date: date = None
    non_cancellable_years: float = None
    fixed_payment_per_period: float = None
    ibr_annual: float = None
    payment_frequency: Union[PaymentFrequency, str] = PaymentFrequency.MONTHLY
    payment_timing: Union[PaymentTiming, str] = PaymentTiming.ARREARS
    initial_direct_costs: float = 0.0
    prepayments_before_commencement: float = 0.0
    lease_incentives: float = 0.0
    useful_life_years: Optional[float] = None
    purchase_option_reasonably_certain: bool = False
    escalation_type: Union[EscalationType, str] = EscalationType.NONE
    fixed_escalation_pct: float = 0.0
    base_cpi: Optional[float] = None
    cpi_reset_month: Optional[int] = None
    first_reset_year_offset: int = 0
    currency: str = "NGN"
    lessee_entity: str = ""
    lessor_name: str = ""
    asset_description: str = ""
    asset_class: str = ""

    def __post_init__(self):
        # Frozen: normalised values are written back through object.__setattr__
        def put(name, value):
            object.__setattr__(self, name, value)

        for name in REQUIRED_FIELDS:
            if getattr(self, name) is None:
                raise ValidationError(name, "is required")

        if not isinstance(self.contract_id, str) or not self.contract_id.strip():
            raise ValidationError("contract_id", "is required")
        put("contract_id", self.contract_id.strip())

        if isinstance(self.commencement_date, datetime):
            put("commencement_date", self.commencement_date.date())
        elif not isinstance(self.commencement_date, date):
            raise ValidationError("commencement_date", "must be a date")

        years = _require_number("non_cancellable_years", self.non_cancellable_years)
        if years <= 0:
            raise ValidationError("non_cancellable_years", "must be greater than zero")
        put("non_cancellable_years", years)

        put("fixed_payment_per_period",
            _non_negative("fixed_payment_per_period", self.fixed_payment_per_period))

        ibr = _require_number("ibr_annual", self.ibr_annual)
        if not 0 <= ibr < 1:
            raise ValidationError("ibr_annual", "must be a fraction in [0, 1), e.g. 0.14 for 14%")
        put("ibr_annual", ibr)

        put("payment_frequency",
            parse_enum(PaymentFrequency, self.payment_frequency, "payment_frequency"))
        put("payment_timing", parse_enum(PaymentTiming, self.payment_timing, "payment_timing"))
        put("escalation_type", parse_enum(EscalationType, self.escalation_type, "escalation_type"))

        for name in ("initial_direct_costs", "prepayments_before_commencement", "lease_incentives"):
            put(name, _non_negative(name, getattr(self, name)))

        if self.useful_life_years is not None:
            life = _require_number("useful_life_years", self.useful_life_years)
            if life <= 0:
                raise ValidationError("useful_life_years", "must be greater than zero")
            put("useful_life_years", life)
        if self.purchase_option_reasonably_certain and self.useful_life_years is None:
            raise ValidationError(
                "useful_life_years", "is required when a purchase option is reasonably certain"
            )

        put("fixed_escalation_pct", _non_negative("fixed_escalation_pct", self.fixed_escalation_pct))

        offset = self.first_reset_year_offset
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ValidationError("first_reset_year_offset", "must be a non-negative whole number of years")

        if self.cpi_reset_month is not None:
            month = self.cpi_reset_month
            if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
                raise ValidationError("cpi_reset_month", "must be a month number 1-12")

        if self.escalation_type is EscalationType.CPI:
            if self.base_cpi is None:
                raise ValidationError("base_cpi", "is required for CPI escalation")
            base = _require_number("base_cpi", self.base_cpi)
            if base <= 0:
                raise ValidationError("base_cpi", "must be greater than zero")
            put("base_cpi", base)

        if not isinstance(self.currency, str) or not self.currency.strip():
            raise ValidationError("currency", "is required")

    @property
    def periods_per_year(self) -> int:
        return self.payment_frequency.periods_per_year
