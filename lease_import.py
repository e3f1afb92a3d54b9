# lease_import.py

import logging
import math
import numbers
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from lease_config import DEFAULT_CONFIG, EngineConfig
from lease_contract import REQUIRED_FIELDS, LeaseContract, ValidationError

logger = logging.getLogger(__name__)

# Spreadsheet header -> LeaseContract field
COLUMN_ALIASES: Dict[str, str] = {
    "Contract ID": "contract_id",
    "ContractID": "contract_id",
    "Lessee Entity": "lessee_entity",
    "LesseeEntity": "lessee_entity",
    "Lessor Name": "lessor_name",
    "LessorName": "lessor_name",
    "Asset Description": "asset_description",
    "AssetDescription": "asset_description",
    "Asset Class": "asset_class",
    "AssetClass": "asset_class",
    "Commencement Date": "commencement_date",
    "CommencementDate": "commencement_date",
    "Non-cancellable Years": "non_cancellable_years",
    "NonCancellableYears": "non_cancellable_years",
    "Fixed Payment": "fixed_payment_per_period",
    "FixedPaymentPerPeriod": "fixed_payment_per_period",
    "Payment Frequency": "payment_frequency",
    "PaymentFrequency": "payment_frequency",
    "Payment Timing": "payment_timing",
    "PaymentTiming": "payment_timing",
    "Currency": "currency",
    "IBR Annual": "ibr_annual",
    "IBR_Annual": "ibr_annual",
    "Useful Life Years": "useful_life_years",
    "UsefulLifeYears": "useful_life_years",
    "Initial Direct Costs": "initial_direct_costs",
    "InitialDirectCosts": "initial_direct_costs",
    "Prepayments": "prepayments_before_commencement",
    "PrepaymentsBeforeCommencement": "prepayments_before_commencement",
    "Lease Incentives": "lease_incentives",
    "LeaseIncentives": "lease_incentives",
    "Purchase Option Reasonably Certain": "purchase_option_reasonably_certain",
    "PurchaseOptionReasonablyCertain": "purchase_option_reasonably_certain",
    "Escalation Type": "escalation_type",
    "EscalationType": "escalation_type",
    "Fixed Escalation %": "fixed_escalation_pct",
    "FixedEscalationPct": "fixed_escalation_pct",
    "Base CPI": "base_cpi",
    "BaseCPI": "base_cpi",
    "CPI Reset Month": "cpi_reset_month",
    "CPIResetMonth": "cpi_reset_month",
    "First Reset Year Offset": "first_reset_year_offset",
    "FirstResetYearOffset": "first_reset_year_offset",
}

NUMERIC_FIELDS = {
    "non_cancellable_years",
    "fixed_payment_per_period",
    "ibr_annual",
    "useful_life_years",
    "initial_direct_costs",
    "prepayments_before_commencement",
    "lease_incentives",
    "fixed_escalation_pct",
    "base_cpi",
}
INTEGER_FIELDS = {"cpi_reset_month", "first_reset_year_offset"}
PERCENT_FIELDS = {"ibr_annual", "fixed_escalation_pct"}
DATE_FIELDS = {"commencement_date"}
BOOLEAN_FIELDS = {"purchase_option_reasonably_certain"}

# Day zero of Excel's 1900 date system (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = date(1899, 12, 30)

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0"}


class ImportMappingError(ValueError):
    """A row or cell could not be turned into a LeaseContract."""

    def __init__(self, message: str, row: int = None, column: str = None):
        self.row = row
        self.column = column
        super().__init__(message)


@dataclass
class ImportReport:
    contracts: List[LeaseContract] = field(default_factory=list)
    errors: List[ImportMappingError] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.contracts)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    return isinstance(value, str) and not value.strip()


def parse_number(value: Any, column: str) -> float:
    if isinstance(value, bool):
        raise ImportMappingError(f"{column}: expected a number, got {value!r}", column=column)
    if isinstance(value, numbers.Real):
        return float(value)
    text = str(value).strip().replace(",", "")
    is_percent = text.endswith("%")
    try:
        number = float(text.rstrip("%").strip())
    except ValueError:
        raise ImportMappingError(f"{column}: {value!r} is not a number", column=column) from None
    return number / 100 if is_percent else number


def parse_rate(value: Any, column: str) -> float:
    """Rates above 1 are percentages (14 -> 0.14); fractions pass through."""
    if isinstance(value, str) and value.strip().endswith("%"):
        return parse_number(value, column)
    rate = parse_number(value, column)
    return rate / 100 if rate > 1 else rate


def parse_date(value: Any, column: str) -> date:
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return EXCEL_EPOCH + timedelta(days=int(value))
    try:
        return pd.to_datetime(str(value).strip(), dayfirst=False).date()
    except (ValueError, TypeError):
        raise ImportMappingError(f"{column}: {value!r} is not a date", column=column) from None


def parse_bool(value: Any, column: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if isinstance(value, numbers.Real):
        text = str(int(value))
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ImportMappingError(f"{column}: {value!r} is not yes/no", column=column)


def normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map spreadsheet headers to contract fields and coerce each value to its type."""
    kwargs: Dict[str, Any] = {}
    for column, value in row.items():
        name = COLUMN_ALIASES.get(str(column).strip())
        if name is None or _is_blank(value):
            continue

        if name in PERCENT_FIELDS:
            value = parse_rate(value, column)
        elif name in NUMERIC_FIELDS:
            value = parse_number(value, column)
        elif name in INTEGER_FIELDS:
            number = parse_number(value, column)
            if number != int(number):
                raise ImportMappingError(f"{column}: {value!r} is not a whole number", column=column)
            value = int(number)
        elif name in DATE_FIELDS:
            value = parse_date(value, column)
        elif name in BOOLEAN_FIELDS:
            value = parse_bool(value, column)
        elif isinstance(value, float) and value.is_integer():
            # pandas reads numeric IDs such as 1001 back as 1001.0
            value = str(int(value))
        else:
            value = str(value).strip()

        kwargs[name] = value
    return kwargs


def contract_from_row(row: Dict[str, Any], config: EngineConfig = DEFAULT_CONFIG) -> LeaseContract:
    kwargs = normalize_row(row)
    kwargs.setdefault("currency", config.default_currency)
    if "contract_id" not in kwargs:
        raise ImportMappingError("missing Contract ID", column="Contract ID")
    missing = [name for name in REQUIRED_FIELDS if name not in kwargs]
    if missing:
        raise ImportMappingError(f"missing required columns: {', '.join(missing)}")
    try:
        return LeaseContract(**kwargs)
    except ValidationError as e:
        raise ImportMappingError(str(e), column=e.field) from e


def import_contracts(frame: pd.DataFrame, config: EngineConfig = DEFAULT_CONFIG) -> ImportReport:
    """Build contracts row by row; a bad row is reported and skipped, never fatal to the batch."""
    if frame.empty:
        raise ImportMappingError("No data found in the file")

    report = ImportReport()
    for index, row in enumerate(frame.to_dict(orient="records"), start=1):
        try:
            report.contracts.append(contract_from_row(row, config))
        except ImportMappingError as e:
            e.row = index
            logger.warning("row %d skipped: %s", index, e)
            report.errors.append(e)

    logger.info("imported %d contracts, %d rows rejected", report.imported, len(report.errors))
    return report


def read_contracts(
    source: Union[str, Path, Any], filename: str = None, config: EngineConfig = DEFAULT_CONFIG
) -> ImportReport:
    """Read a CSV or Excel (.xlsx/.xls) upload; `source` may be a path or file-like object."""
    name = filename or str(getattr(source, "name", source))
    suffix = Path(name).suffix.lower()
    if suffix == ".csv":
        frame = pd.read_csv(source)
    elif suffix in (".xlsx", ".xls"):
        frame = pd.read_excel(source, sheet_name=0)
    else:
        raise ImportMappingError("Please select an Excel (.xlsx, .xls) or CSV file")
    frame = frame.dropna(how="all")
    return import_contracts(frame, config)


def parse_cpi_observations(text: str) -> Dict[int, float]:
    """Parse `period=index` lines (commas or semicolons also separate entries) into a CPI mapping."""
    observations: Dict[int, float] = {}
    for entry in text.replace(";", "\n").replace(",", "\n").splitlines():
        entry = entry.strip()
        if not entry:
            continue
        period, sep, value = entry.partition("=")
        if not sep:
            raise ImportMappingError(f"CPI observation {entry!r} must look like period=index")
        try:
            observations[int(period.strip())] = float(value.strip())
        except ValueError:
            raise ImportMappingError(f"CPI observation {entry!r} is not numeric") from None
    return observations
