# qa_checks.py

import logging
from typing import List

import pandas as pd

from lease_calculations import CalculationResult
from lease_config import DEFAULT_CONFIG, configure_logging

logger = logging.getLogger(__name__)


class ScheduleCheckError(AssertionError):
    def __init__(self, failures: List[str]):
        self.failures = failures
        super().__init__("IFRS 16 QA validation failed: " + "; ".join(failures))


def run_ifrs16_checks(result: CalculationResult, tolerance: float = DEFAULT_CONFIG.zero_tolerance) -> List[str]:
    """Return one message per broken schedule identity; an empty list means the schedule is sound."""
    errors: List[str] = []
    rows = result.amortization_schedule

    if not rows:
        return ["Amortization schedule is empty."]

    # 1. Liability and ROU asset run off to zero
    if abs(rows[-1].remaining_liability) > tolerance:
        errors.append(f"Lease liability does not reduce to zero at lease end ({rows[-1].remaining_liability:,.2f}).")
    if abs(rows[-1].remaining_asset) > tolerance:
        errors.append(f"Right-of-use asset does not reduce to zero at lease end ({rows[-1].remaining_asset:,.2f}).")

    # 2. interest + principal = payment, every period
    for row in rows:
        if abs(row.interest + row.principal - row.payment) > tolerance:
            errors.append(f"Period {row.month}: interest + principal does not equal payment.")

    # 3. Reported totals match the schedule
    if abs(sum(r.interest for r in rows) - result.total_interest) > tolerance:
        errors.append("Total interest does not equal the sum of periodic interest.")
    if abs(sum(r.depreciation for r in rows) - result.total_depreciation) > tolerance:
        errors.append("Total depreciation does not equal the sum of periodic depreciation.")
    if abs(result.total_depreciation - result.initial_rou) > tolerance:
        errors.append(
            f"Total depreciation ({result.total_depreciation:,.2f}) does not equal the ROU asset ({result.initial_rou:,.2f})."
        )

    # 4. Straight-line: every depreciation charge but the last within one cent of the first
    charges = [r.depreciation for r in rows[: result.depreciation_periods - 1]]
    if charges and any(abs(d - charges[0]) > 0.01 for d in charges):
        errors.append("Depreciation is not straight-line.")

    return errors


def assert_schedule_valid(result: CalculationResult, tolerance: float = DEFAULT_CONFIG.zero_tolerance) -> None:
    errors = run_ifrs16_checks(result, tolerance)
    if errors:
        for error in errors:
            logger.error("%s: %s", result.contract_id, error)
        raise ScheduleCheckError(errors)
    logger.info("%s: all IFRS 16 QA checks passed", result.contract_id)


def run_checks_on_export(df: pd.DataFrame, tolerance: float = 0.01) -> List[str]:
    """Checks that survive a CSV round-trip of the amortization export."""
    errors: List[str] = []
    if df.empty:
        return ["Exported schedule is empty."]
    if abs(float(df["Remaining Liability"].iloc[-1])) > tolerance:
        errors.append("Lease liability does not reduce to zero at lease end.")
    if abs(float(df["Remaining Asset"].iloc[-1])) > tolerance:
        errors.append("Right-of-use asset does not reduce to zero at lease end.")
    drift = (df["Interest"] + df["Principal"] - df["Payment"]).abs()
    if (drift > tolerance).any():
        errors.append(f"interest + principal differs from payment in {int((drift > tolerance).sum())} periods.")
    return errors


if __name__ == "__main__":
    configure_logging()
    try:
        schedule = pd.read_csv("schedule.csv")
    except FileNotFoundError:
        logger.warning("schedule.csv not found. QA skipped.")
    else:
        failures = run_checks_on_export(schedule)
        for failure in failures:
            logger.error(failure)
        if failures:
            raise SystemExit(1)
        logger.info("All IFRS 16 QA checks passed.")
