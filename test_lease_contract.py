from lease_contract import (
    EscalationType,
    LeaseContract,
    PaymentFrequency,
    PaymentTiming,
    ValidationError,
)
from datetime import date, datetime
import dataclasses
import pytest


def base_terms(**overrides):
    terms = dict(
        contract_id="LC-2024-002",
        commencement_date=date(2024, 3, 1),
        non_cancellable_years=5,
        fixed_payment_per_period=250_000.0,
        ibr_annual=0.14,
    )
    terms.update(overrides)
    return terms


def test_defaults_and_enum_labels() -> None:
    contract = LeaseContract(**base_terms(payment_frequency="Semi-Annual", payment_timing="in advance"))
    assert contract.payment_frequency is PaymentFrequency.SEMI_ANNUAL
    assert contract.payment_timing is PaymentTiming.ADVANCE
    assert contract.escalation_type is EscalationType.NONE
    assert contract.periods_per_year == 2
    assert contract.currency == "NGN"
    assert contract.initial_direct_costs == 0.0


def test_frequency_periods() -> None:
    assert [f.periods_per_year for f in PaymentFrequency] == [12, 4, 2, 1]
    assert [f.months_per_period for f in PaymentFrequency] == [1, 3, 6, 12]


def test_contract_is_immutable() -> None:
    contract = LeaseContract(**base_terms())
    with pytest.raises(dataclasses.FrozenInstanceError):
        contract.fixed_payment_per_period = 1.0


def test_datetime_commencement_is_normalised() -> None:
    contract = LeaseContract(**base_terms(commencement_date=datetime(2024, 3, 1, 9, 30)))
    assert contract.commencement_date == date(2024, 3, 1)


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"contract_id": "  "}, "contract_id"),
        ({"commencement_date": "2024-03-01"}, "commencement_date"),
        ({"non_cancellable_years": 0}, "non_cancellable_years"),
        ({"non_cancellable_years": -2}, "non_cancellable_years"),
        ({"fixed_payment_per_period": -1.0}, "fixed_payment_per_period"),
        ({"fixed_payment_per_period": "250000"}, "fixed_payment_per_period"),
        ({"fixed_payment_per_period": float("nan")}, "fixed_payment_per_period"),
        ({"ibr_annual": 14}, "ibr_annual"),
        ({"ibr_annual": -0.01}, "ibr_annual"),
        ({"ibr_annual": True}, "ibr_annual"),
        ({"payment_frequency": "Weekly"}, "payment_frequency"),
        ({"payment_timing": None}, "payment_timing"),
        ({"lease_incentives": -5.0}, "lease_incentives"),
        ({"useful_life_years": 0}, "useful_life_years"),
        ({"purchase_option_reasonably_certain": True}, "useful_life_years"),
        ({"escalation_type": "CPI"}, "base_cpi"),
        ({"escalation_type": "CPI", "base_cpi": 0.0}, "base_cpi"),
        ({"cpi_reset_month": 13}, "cpi_reset_month"),
        ({"first_reset_year_offset": -1}, "first_reset_year_offset"),
        ({"currency": ""}, "currency"),
    ],
)
def test_validation_failures(overrides, field) -> None:
    with pytest.raises(ValidationError) as excinfo:
        LeaseContract(**base_terms(**overrides))
    assert excinfo.value.field == field
    assert field in str(excinfo.value)


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        LeaseContract(**base_terms(ibr_annual=1.0))


@pytest.mark.parametrize(
    "missing",
    ["contract_id", "commencement_date", "non_cancellable_years", "fixed_payment_per_period", "ibr_annual"],
)
def test_omitted_required_field_is_a_validation_error(missing) -> None:
    terms = base_terms()
    del terms[missing]
    with pytest.raises(ValidationError) as excinfo:
        LeaseContract(**terms)
    assert excinfo.value.field == missing
    assert excinfo.value.reason == "is required"
