# lease_calculations.py

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Mapping, Optional, Tuple, Union

import numpy as np
from dateutil.relativedelta import relativedelta

from lease_config import DEFAULT_CONFIG, EngineConfig
from lease_contract import EscalationType, LeaseContract, PaymentTiming, ValidationError

logger = logging.getLogger(__name__)

CpiIndex = Mapping[int, float]
Money = Union[Decimal, float, int]


class AnomalyKind(Enum):
    NEGATIVE_AMORTIZATION = "negative_amortization"
    NEGATIVE_ROU_CLAMPED = "negative_rou_clamped"
    ZERO_LIABILITY = "zero_liability"


@dataclass(frozen=True)
class ArithmeticAnomaly:
    """Non-fatal condition found while computing; returned with the result for display."""
    kind: AnomalyKind
    message: str
    period: Optional[int] = None


@dataclass(frozen=True)
class InitialMeasurement:
    initial_liability: Decimal
    initial_rou: Decimal
    periodic_rate: float
    period_count: int
    anomalies: Tuple[ArithmeticAnomaly, ...] = ()


@dataclass(frozen=True)
class LiabilityRow:
    period: int
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_liability: Decimal


@dataclass(frozen=True)
class DepreciationRow:
    period: int
    depreciation: Decimal
    remaining_asset: Decimal


@dataclass(frozen=True)
class CashflowRow:
    period: int
    date: date
    rent: Decimal


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    date: date
    payment: Decimal
    interest: Decimal
    principal: Decimal
    remaining_liability: Decimal
    depreciation: Decimal
    remaining_asset: Decimal


@dataclass(frozen=True)
class CalculationResult:
    contract_id: str
    currency: str
    initial_liability: Decimal
    initial_rou: Decimal
    total_interest: Decimal
    total_depreciation: Decimal
    total_payments: Decimal
    periodic_rate: float
    period_count: int
    depreciation_periods: int
    cashflow_schedule: Tuple[CashflowRow, ...]
    amortization_schedule: Tuple[AmortizationRow, ...]
    anomalies: Tuple[ArithmeticAnomaly, ...] = ()


def _to_decimal(value: Money) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    # Shortest repr, so 2.675 rounds as the user typed it
    return Decimal(str(float(value)))


def _money(value: Money, config: EngineConfig) -> Decimal:
    """Quantize to the configured currency precision, half-up; never returns -0."""
    exponent = Decimal(1).scaleb(-config.currency_precision)
    amount = _to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)
    return amount.copy_abs() if amount.is_zero() else amount


def _whole_periods(years: float, periods_per_year: int) -> int:
    return int((_to_decimal(years) * periods_per_year).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def periodic_rate(ibr_annual: float, periods_per_year: int) -> float:
    """Effective rate per payment period, compounding-consistent with the annual IBR."""
    if ibr_annual <= -1:
        raise ValidationError("ibr_annual", "rate must be greater than -100%")
    return (1 + ibr_annual) ** (1 / periods_per_year) - 1


def period_count(contract: LeaseContract) -> int:
    """Lease term in whole payment periods: nearest integer (halves round up), never below one."""
    return max(1, _whole_periods(contract.non_cancellable_years, contract.periods_per_year))


def period_date(contract: LeaseContract, offset: int) -> date:
    months = contract.payment_frequency.months_per_period * offset
    return contract.commencement_date + relativedelta(months=months)


def _reset_periods(contract: LeaseContract, n_periods: int) -> List[int]:
    """Periods at whose start an escalation step takes effect."""
    ppy = contract.periods_per_year
    offset = contract.first_reset_year_offset

    if contract.escalation_type is EscalationType.CPI and contract.cpi_reset_month is not None:
        starts = [period_date(contract, p - 1) for p in range(1, n_periods + 1)]
        earliest = contract.commencement_date + relativedelta(years=offset)
        reset_date = date(earliest.year, contract.cpi_reset_month, 1)
        if reset_date < earliest:
            reset_date += relativedelta(years=1)
        if reset_date <= contract.commencement_date:
            reset_date += relativedelta(years=1)

        resets: List[int] = []
        while reset_date <= starts[-1]:
            period = next(p for p, start in enumerate(starts, start=1) if start >= reset_date)
            if period > 1 and (not resets or resets[-1] != period):
                resets.append(period)
            reset_date += relativedelta(years=1)
        return resets

    # Lease-year anniversaries after the offset year
    return [p for p in range(1, n_periods + 1, ppy) if (p - 1) // ppy > offset]


def payment_stream(
    contract: LeaseContract,
    n_periods: int,
    cpi_index: Optional[CpiIndex] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[Decimal]:
    """
    Nominal payment due in each period 1..n_periods.

    Fixed escalation compounds once per reset; CPI escalation rebases the
    payment to cpi_index[reset period] / base_cpi at each reset.
    """
    base = contract.fixed_payment_per_period
    if contract.escalation_type is EscalationType.NONE:
        return [_money(base, config)] * n_periods

    resets = set(_reset_periods(contract, n_periods))
    payments = []
    factor = 1.0
    steps = 0
    for p in range(1, n_periods + 1):
        if p in resets:
            if contract.escalation_type is EscalationType.FIXED:
                steps += 1
                factor = (1 + contract.fixed_escalation_pct) ** steps
            else:
                factor = _cpi_observation(cpi_index, p) / contract.base_cpi
        payments.append(_money(base * factor, config))
    return payments


def _cpi_observation(cpi_index: Optional[CpiIndex], period: int) -> float:
    if cpi_index is None or period not in cpi_index:
        raise ValidationError("cpi_index", f"no CPI observation supplied for reset period {period}")
    value = cpi_index[period]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise ValidationError("cpi_index", f"CPI for period {period} must be a positive number")
    return float(value)


def calculate_lease_liability(
    payments: List[Money],
    rate: float,
    payment_timing: PaymentTiming = PaymentTiming.ARREARS,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Decimal:
    """Present value of an arbitrary payment stream, discounted period by period."""
    if not payments:
        raise ValidationError("payments", "payment stream cannot be empty")
    if rate == 0:
        return _money(sum(_to_decimal(p) for p in payments), config)

    first = 1 if payment_timing is PaymentTiming.ARREARS else 0
    periods = np.arange(first, len(payments) + first)
    discount_factors = 1 / ((1 + rate) ** periods)
    return _money(float(np.dot(np.array(payments, dtype=float), discount_factors)), config)


def annuity_present_value(
    payment: Money,
    rate: float,
    n_periods: int,
    payment_timing: PaymentTiming = PaymentTiming.ARREARS,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Decimal:
    """
    Closed-form PV of level payments.

    Ordinary annuity: PMT * (1 - (1 + r)^-n) / r
    Annuity due:      ordinary annuity * (1 + r)
    """
    if n_periods <= 0:
        raise ValidationError("period_count", "must be at least one period")
    if rate == 0:
        return _money(_to_decimal(payment) * n_periods, config)

    pv = float(payment) * (1 - (1 + rate) ** -n_periods) / rate
    if payment_timing is PaymentTiming.ADVANCE:
        pv *= 1 + rate
    return _money(pv, config)


def calculate_right_of_use_asset(
    liability: Money,
    direct_costs: Money = 0,
    incentives: Money = 0,
    prepayments: Money = 0,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Tuple[Decimal, Optional[ArithmeticAnomaly]]:
    """ROU = liability + direct costs + prepayments - incentives, clamped at zero."""
    amounts = [_money(x, config) for x in (liability, direct_costs, incentives, prepayments)]
    if any(x < 0 for x in amounts):
        raise ValidationError("rou_inputs", "all ROU components must be non-negative")

    liability, direct_costs, incentives, prepayments = amounts
    rou = liability + direct_costs + prepayments - incentives
    if rou >= 0:
        return rou, None

    anomaly = ArithmeticAnomaly(
        AnomalyKind.NEGATIVE_ROU_CLAMPED,
        f"ROU asset of {rou:,.2f} clamped to zero; lease incentives exceed the liability and costs",
    )
    return _money(0, config), anomaly


def measure_initial(
    contract: LeaseContract,
    cpi_index: Optional[CpiIndex] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> InitialMeasurement:
    rate = periodic_rate(contract.ibr_annual, contract.periods_per_year)
    n_periods = period_count(contract)

    if contract.escalation_type is EscalationType.NONE:
        liability = annuity_present_value(
            contract.fixed_payment_per_period, rate, n_periods, contract.payment_timing, config
        )
    else:
        payments = payment_stream(contract, n_periods, cpi_index, config)
        liability = calculate_lease_liability(payments, rate, contract.payment_timing, config)

    rou, rou_anomaly = calculate_right_of_use_asset(
        liability,
        contract.initial_direct_costs,
        contract.lease_incentives,
        contract.prepayments_before_commencement,
        config,
    )

    anomalies = []
    if liability == 0:
        anomalies.append(ArithmeticAnomaly(
            AnomalyKind.ZERO_LIABILITY, "lease has no payments to discount; liability is zero"
        ))
    if rou_anomaly is not None:
        anomalies.append(rou_anomaly)

    logger.debug(
        "initial measurement %s: rate=%.8f periods=%d liability=%.2f rou=%.2f",
        contract.contract_id, rate, n_periods, liability, rou,
    )
    return InitialMeasurement(liability, rou, rate, n_periods, tuple(anomalies))


def build_amortization_schedule(
    contract: LeaseContract,
    initial_liability: Money,
    rate: float,
    n_periods: int,
    cpi_index: Optional[CpiIndex] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Tuple[List[LiabilityRow], List[ArithmeticAnomaly]]:
    """
    Effective-interest run-off of the lease liability.

    Advance payments reduce the balance before interest accrues; arrears
    payments after. The final period settles whatever balance remains, and
    interest absorbs the rounding difference so payment = interest + principal.
    """
    if n_periods <= 0:
        raise ValidationError("period_count", "must be at least one period")

    payments = payment_stream(contract, n_periods, cpi_index, config)
    advance = contract.payment_timing is PaymentTiming.ADVANCE

    schedule: List[LiabilityRow] = []
    anomalies: List[ArithmeticAnomaly] = []
    rate = _to_decimal(rate)
    remaining = _money(initial_liability, config)

    for period, payment in enumerate(payments, start=1):
        if period == n_periods:
            principal = remaining
            interest = payment - principal
            remaining = _money(0, config)
        else:
            basis = remaining - payment if advance else remaining
            interest = _money(basis * rate, config)
            principal = payment - interest
            remaining = remaining - principal

        if principal < 0:
            anomalies.append(ArithmeticAnomaly(
                AnomalyKind.NEGATIVE_AMORTIZATION,
                f"payment {payment:,.2f} does not cover interest {interest:,.2f}",
                period,
            ))

        schedule.append(LiabilityRow(period, payment, interest, principal, remaining))

    return schedule, anomalies


def depreciation_periods(contract: LeaseContract, lease_periods: int) -> int:
    """
    Depreciation runs over the lease term, or the useful life when shorter.
    If ownership is expected to transfer, it runs over the useful life.
    """
    if contract.useful_life_years is None:
        return lease_periods
    life_periods = max(1, _whole_periods(contract.useful_life_years, contract.periods_per_year))
    if contract.purchase_option_reasonably_certain:
        return life_periods
    return min(lease_periods, life_periods)


def build_depreciation_schedule(
    initial_rou: Money,
    n_periods: int,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[DepreciationRow]:
    if n_periods <= 0:
        raise ValidationError("depreciation_periods", "must be at least one period")

    initial_rou = _money(initial_rou, config)
    per_period = _money(initial_rou / n_periods, config)
    schedule: List[DepreciationRow] = []
    cumulative_depr = _money(0, config)

    for i in range(n_periods):
        depr = initial_rou - cumulative_depr if i == n_periods - 1 else per_period
        cumulative_depr += depr
        balance = initial_rou - cumulative_depr
        schedule.append(DepreciationRow(i + 1, depr, balance))

    return schedule


def build_cashflow_schedule(
    contract: LeaseContract,
    n_periods: int,
    cpi_index: Optional[CpiIndex] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[CashflowRow]:
    payments = payment_stream(contract, n_periods, cpi_index, config)
    return [
        CashflowRow(p, period_date(contract, p), rent)
        for p, rent in enumerate(payments, start=1)
    ]


def merge_schedules(
    contract: LeaseContract,
    liability_rows: List[LiabilityRow],
    depreciation_rows: List[DepreciationRow],
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[AmortizationRow]:
    """Join liability and asset rows on period; a side that has ended shows zeros."""
    zero = _money(0, config)
    rows: List[AmortizationRow] = []
    for i in range(max(len(liability_rows), len(depreciation_rows))):
        period = i + 1
        if i < len(liability_rows):
            lr = liability_rows[i]
            payment, interest, principal, remaining = lr.payment, lr.interest, lr.principal, lr.remaining_liability
        else:
            payment = interest = principal = remaining = zero
        if i < len(depreciation_rows):
            depr, balance = depreciation_rows[i].depreciation, depreciation_rows[i].remaining_asset
        else:
            depr = balance = zero
        rows.append(AmortizationRow(
            month=period,
            date=period_date(contract, period),
            payment=payment,
            interest=interest,
            principal=principal,
            remaining_liability=remaining,
            depreciation=depr,
            remaining_asset=balance,
        ))
    return rows


def compute(
    contract: LeaseContract,
    cpi_index: Optional[CpiIndex] = None,
    config: Optional[EngineConfig] = None,
) -> CalculationResult:
    """
    Run the full IFRS 16 measurement for one contract.

    Raises ValidationError before any schedule is built when the contract or
    the injected CPI observations are unusable; no partial result is returned.
    """
    if not isinstance(contract, LeaseContract):
        raise ValidationError("contract", f"expected LeaseContract, got {type(contract).__name__}")
    config = config or DEFAULT_CONFIG

    # Resolve the payment stream up front so CPI gaps fail before any schedule work
    payment_stream(contract, period_count(contract), cpi_index, config)

    initial = measure_initial(contract, cpi_index, config)
    liability_rows, amort_anomalies = build_amortization_schedule(
        contract, initial.initial_liability, initial.periodic_rate, initial.period_count, cpi_index, config
    )
    dep_periods = depreciation_periods(contract, initial.period_count)
    depreciation_rows = build_depreciation_schedule(initial.initial_rou, dep_periods, config)
    cashflow = build_cashflow_schedule(contract, initial.period_count, cpi_index, config)
    amortization = merge_schedules(contract, liability_rows, depreciation_rows, config)

    zero = _money(0, config)
    anomalies = initial.anomalies + tuple(amort_anomalies)
    for anomaly in anomalies:
        logger.warning("%s: %s (period %s)", contract.contract_id, anomaly.message, anomaly.period)

    result = CalculationResult(
        contract_id=contract.contract_id,
        currency=contract.currency,
        initial_liability=initial.initial_liability,
        initial_rou=initial.initial_rou,
        total_interest=sum((row.interest for row in amortization), zero),
        total_depreciation=sum((row.depreciation for row in amortization), zero),
        total_payments=sum((row.rent for row in cashflow), zero),
        periodic_rate=initial.periodic_rate,
        period_count=initial.period_count,
        depreciation_periods=dep_periods,
        cashflow_schedule=tuple(cashflow),
        amortization_schedule=tuple(amortization),
        anomalies=anomalies,
    )
    logger.info(
        "calculated %s: liability=%.2f rou=%.2f periods=%d",
        result.contract_id, result.initial_liability, result.initial_rou, result.period_count,
    )
    return result
