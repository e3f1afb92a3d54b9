# schedule_export.py

from decimal import Decimal
from io import BytesIO
from typing import Any, Dict, Optional

import pandas as pd

from lease_calculations import CalculationResult
from lease_contract import LeaseContract

AMORTIZATION_COLUMNS = {
    "month": "Month",
    "date": "Date",
    "payment": "Payment",
    "interest": "Interest",
    "principal": "Principal",
    "remaining_liability": "Remaining Liability",
    "depreciation": "Depreciation",
    "remaining_asset": "Remaining Asset",
}

CASHFLOW_COLUMNS = {"period": "Period", "date": "Date", "rent": "Rent Amount"}


def format_currency(value, currency: str = "NGN") -> str:
    return f"{currency} {value:,.2f}"


def _as_record(row: Any) -> Dict[str, Any]:
    # Engine amounts are Decimal; frames and spreadsheets carry floats
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in vars(row).items()}


def amortization_frame(result: CalculationResult) -> pd.DataFrame:
    rows = [_as_record(row) for row in result.amortization_schedule]
    return pd.DataFrame(rows, columns=list(AMORTIZATION_COLUMNS)).rename(columns=AMORTIZATION_COLUMNS)


def cashflow_frame(result: CalculationResult) -> pd.DataFrame:
    rows = [_as_record(row) for row in result.cashflow_schedule]
    return pd.DataFrame(rows, columns=list(CASHFLOW_COLUMNS)).rename(columns=CASHFLOW_COLUMNS)


def summary_frame(result: CalculationResult, contract: Optional[LeaseContract] = None) -> pd.DataFrame:
    """Headline figures exactly as computed by the engine, plus contract terms when given."""
    summary = {
        "Contract ID": result.contract_id,
        "Initial Lease Liability": float(result.initial_liability),
        "Initial ROU Asset": float(result.initial_rou),
        "Total Interest": float(result.total_interest),
        "Total Depreciation": float(result.total_depreciation),
        "Total Payments": float(result.total_payments),
        "Periodic Rate": f"{result.periodic_rate:.6%}",
        "Payment Periods": result.period_count,
        "Depreciation Periods": result.depreciation_periods,
        "Currency": result.currency,
    }
    if contract is not None:
        summary.update({
            "Commencement Date": contract.commencement_date.isoformat(),
            "Lease Term (years)": contract.non_cancellable_years,
            "Payment Frequency": contract.payment_frequency.value,
            "Payment Timing": contract.payment_timing.value,
            "IBR (annual)": f"{contract.ibr_annual:.2%}",
            "Escalation": contract.escalation_type.value,
        })
    return pd.DataFrame({"Description": list(summary), "Value": list(summary.values())})


def anomalies_frame(result: CalculationResult) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Period": a.period, "Kind": a.kind.value, "Message": a.message} for a in result.anomalies],
        columns=["Period", "Kind", "Message"],
    )


def to_csv(result: CalculationResult) -> str:
    return amortization_frame(result).to_csv(index=False)


def to_excel(result: CalculationResult, contract: Optional[LeaseContract] = None) -> bytes:
    """Workbook with Summary, Cashflow and Amortization sheets (and Anomalies when any)."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        summary_frame(result, contract).to_excel(writer, sheet_name="Summary", index=False)
        cashflow_frame(result).to_excel(writer, sheet_name="Cashflow", index=False)
        amortization_frame(result).to_excel(writer, sheet_name="Amortization", index=False)
        if result.anomalies:
            anomalies_frame(result).to_excel(writer, sheet_name="Anomalies", index=False)
    return output.getvalue()


def export_filename(result: CalculationResult, extension: str) -> str:
    safe_id = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in result.contract_id)
    return f"{safe_id}_ifrs16_schedule.{extension}"
