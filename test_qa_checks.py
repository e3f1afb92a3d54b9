from lease_calculations import compute
from lease_contract import LeaseContract
from qa_checks import ScheduleCheckError, assert_schedule_valid, run_checks_on_export, run_ifrs16_checks
from schedule_export import amortization_frame
from datetime import date
import dataclasses
import pytest


def sample_result():
    contract = LeaseContract(
        contract_id="LC-QA",
        commencement_date=date(2024, 1, 1),
        non_cancellable_years=3,
        fixed_payment_per_period=75_000.0,
        ibr_annual=0.14,
        prepayments_before_commencement=2_500.0,
    )
    return compute(contract)


def test_engine_output_passes_all_checks() -> None:
    result = sample_result()
    assert run_ifrs16_checks(result) == []
    assert_schedule_valid(result)


def test_unsettled_liability_is_reported() -> None:
    result = sample_result()
    rows = list(result.amortization_schedule)
    rows[-1] = dataclasses.replace(rows[-1], remaining_liability=12.5)
    broken = dataclasses.replace(result, amortization_schedule=tuple(rows))

    errors = run_ifrs16_checks(broken)
    assert any("Lease liability" in e for e in errors)
    with pytest.raises(ScheduleCheckError) as excinfo:
        assert_schedule_valid(broken)
    assert excinfo.value.failures == errors


def test_identity_and_total_drift_are_reported() -> None:
    result = sample_result()
    rows = list(result.amortization_schedule)
    rows[3] = dataclasses.replace(rows[3], interest=rows[3].interest + 1)
    broken = dataclasses.replace(result, amortization_schedule=tuple(rows))

    errors = run_ifrs16_checks(broken)
    assert "Period 4: interest + principal does not equal payment." in errors
    assert "Total interest does not equal the sum of periodic interest." in errors


def test_non_straight_line_depreciation_is_reported() -> None:
    result = sample_result()
    rows = list(result.amortization_schedule)
    rows[0] = dataclasses.replace(rows[0], depreciation=rows[0].depreciation + 5)
    rows[1] = dataclasses.replace(rows[1], depreciation=rows[1].depreciation - 5)
    broken = dataclasses.replace(result, amortization_schedule=tuple(rows))
    assert "Depreciation is not straight-line." in run_ifrs16_checks(broken)


def test_export_checks() -> None:
    df = amortization_frame(sample_result())
    assert run_checks_on_export(df) == []
    df.loc[df.index[-1], "Remaining Asset"] = 100.0
    assert run_checks_on_export(df) == ["Right-of-use asset does not reduce to zero at lease end."]
