from lease_import import (
    ImportMappingError,
    contract_from_row,
    import_contracts,
    normalize_row,
    parse_cpi_observations,
    parse_date,
    parse_rate,
    read_contracts,
)
from lease_config import EngineConfig
from lease_contract import PaymentFrequency, PaymentTiming
from datetime import date
import pandas as pd
import pytest


def spreadsheet_row(**overrides):
    row = {
        "Contract ID": "LC-2024-010",
        "Lessee Entity": "ABC Corp",
        "Lessor Name": "XYZ Leasing",
        "Asset Description": "Office Equipment",
        "Commencement Date": "2024-01-01",
        "Non-cancellable Years": 3,
        "Fixed Payment": "1,000,000",
        "Payment Frequency": "Monthly",
        "Payment Timing": "Arrears",
        "Currency": "NGN",
        "IBR Annual": 12,
    }
    row.update(overrides)
    return row


def test_contract_from_row_maps_and_coerces() -> None:
    contract = contract_from_row(spreadsheet_row())
    assert contract.contract_id == "LC-2024-010"
    assert contract.lessee_entity == "ABC Corp"
    assert contract.commencement_date == date(2024, 1, 1)
    assert contract.fixed_payment_per_period == 1_000_000.0
    assert contract.ibr_annual == pytest.approx(0.12)
    assert contract.payment_frequency is PaymentFrequency.MONTHLY
    assert contract.payment_timing is PaymentTiming.ARREARS


def test_compact_header_aliases() -> None:
    row = {
        "ContractID": "LC-7",
        "CommencementDate": "2025-06-30",
        "NonCancellableYears": "2",
        "FixedPaymentPerPeriod": 500,
        "IBR_Annual": 0.09,
        "PaymentFrequency": "Quarterly",
        "PaymentTiming": "Advance",
        "UsefulLifeYears": 4,
    }
    contract = contract_from_row(row)
    assert contract.ibr_annual == 0.09
    assert contract.payment_frequency is PaymentFrequency.QUARTERLY
    assert contract.useful_life_years == 4.0


def test_rate_percentage_detection() -> None:
    assert parse_rate(14, "IBR Annual") == pytest.approx(0.14)
    assert parse_rate("14%", "IBR Annual") == pytest.approx(0.14)
    assert parse_rate(0.14, "IBR Annual") == 0.14
    assert parse_rate(1, "IBR Annual") == 1


def test_excel_serial_dates() -> None:
    assert parse_date(45292, "Commencement Date") == date(2024, 1, 1)
    assert parse_date(pd.Timestamp("2024-02-29"), "Commencement Date") == date(2024, 2, 29)


def test_blank_cells_and_unknown_columns_are_ignored() -> None:
    kwargs = normalize_row(spreadsheet_row(**{"Asset Class": "", "Notes": "ignored", "Lessor Name": float("nan")}))
    assert "asset_class" not in kwargs
    assert "lessor_name" not in kwargs
    assert "Notes" not in kwargs


def test_numeric_contract_id_from_pandas() -> None:
    assert contract_from_row(spreadsheet_row(**{"Contract ID": 1001.0})).contract_id == "1001"


def test_escalation_columns() -> None:
    contract = contract_from_row(spreadsheet_row(**{
        "Escalation Type": "Fixed",
        "Fixed Escalation %": 5,
        "First Reset Year Offset": "1",
        "Purchase Option Reasonably Certain": "no",
    }))
    assert contract.fixed_escalation_pct == pytest.approx(0.05)
    assert contract.first_reset_year_offset == 1
    assert contract.purchase_option_reasonably_certain is False


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"Contract ID": ""}, "Contract ID"),
        ({"Fixed Payment": "one million"}, "not a number"),
        ({"Commencement Date": "someday"}, "not a date"),
        ({"Payment Frequency": "Fortnightly"}, "payment_frequency"),
        ({"Non-cancellable Years": 0}, "non_cancellable_years"),
        ({"IBR Annual": None}, "ibr_annual"),
    ],
)
def test_bad_rows_raise_mapping_error(overrides, message) -> None:
    with pytest.raises(ImportMappingError) as excinfo:
        contract_from_row(spreadsheet_row(**overrides))
    assert message in str(excinfo.value)


def test_batch_isolates_bad_rows() -> None:
    frame = pd.DataFrame([
        spreadsheet_row(),
        spreadsheet_row(**{"Contract ID": "LC-2024-011", "Fixed Payment": "n/a"}),
        spreadsheet_row(**{"Contract ID": None}),
        spreadsheet_row(**{"Contract ID": "LC-2024-012", "Payment Frequency": "Annual"}),
    ])
    report = import_contracts(frame)

    assert [c.contract_id for c in report.contracts] == ["LC-2024-010", "LC-2024-012"]
    assert report.imported == 2
    assert [e.row for e in report.errors] == [2, 3]


def test_empty_frame_is_rejected() -> None:
    with pytest.raises(ImportMappingError):
        import_contracts(pd.DataFrame())


def test_read_contracts_from_csv(tmp_path) -> None:
    path = tmp_path / "contracts.csv"
    pd.DataFrame([spreadsheet_row(), spreadsheet_row(**{"Contract ID": "LC-2024-013"})]).to_csv(path, index=False)
    report = read_contracts(path)
    assert report.imported == 2
    assert report.errors == []


def test_read_contracts_from_excel(tmp_path) -> None:
    path = tmp_path / "contracts.xlsx"
    pd.DataFrame([spreadsheet_row()]).to_excel(path, index=False)
    report = read_contracts(path)
    assert report.contracts[0].contract_id == "LC-2024-010"


def test_read_contracts_rejects_other_formats(tmp_path) -> None:
    with pytest.raises(ImportMappingError):
        read_contracts(tmp_path / "contracts.pdf")


def test_parse_cpi_observations() -> None:
    assert parse_cpi_observations("13=105.2\n25 = 109.9") == {13: 105.2, 25: 109.9}
    assert parse_cpi_observations("13=105; 25=110") == {13: 105.0, 25: 110.0}
    assert parse_cpi_observations("  ") == {}
    with pytest.raises(ImportMappingError):
        parse_cpi_observations("13:105")
    with pytest.raises(ImportMappingError):
        parse_cpi_observations("thirteen=105")


def test_missing_currency_uses_configured_default() -> None:
    row = spreadsheet_row()
    del row["Currency"]
    assert contract_from_row(row).currency == "NGN"
    assert contract_from_row(row, EngineConfig(default_currency="USD")).currency == "USD"
