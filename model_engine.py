import logging
from typing import Dict, Optional

import streamlit as st

from lease_calculations import CalculationResult, compute
from lease_config import EngineConfig
from lease_contract import LeaseContract, ValidationError
from qa_tab import display_qa
from schedule_export import export_filename, to_csv, to_excel
from schedules_tab import display_amortization, display_cashflow
from summary_tab import display_summary

logger = logging.getLogger(__name__)


def build_contract(inputs: Dict) -> Optional[LeaseContract]:
    try:
        return LeaseContract(**inputs)
    except ValidationError as e:
        st.error(f"Invalid lease terms. {e.field}: {e.reason}")
        return None


def run_ifrs16_model(
    contract: LeaseContract, cpi_index=None, config: Optional[EngineConfig] = None
) -> Optional[CalculationResult]:
    try:
        result = compute(contract, cpi_index=cpi_index, config=config)
    except ValidationError as e:
        logger.info("calculation rejected for %s: %s", contract.contract_id, e)
        st.error(f"Cannot calculate {contract.contract_id}. {e.field}: {e.reason}")
        return None

    st.success("Model generated successfully!")

    tab1, tab2, tab3, tab4 = st.tabs(["Summary", "Cashflow", "Amortization", "QA"])
    display_summary(tab1, result, contract)
    display_cashflow(tab2, result)
    display_amortization(tab3, result)
    display_qa(tab4, result)

    c1, c2 = st.columns(2)
    c1.download_button(
        label="Download Amortization Schedule (CSV)",
        data=to_csv(result),
        file_name=export_filename(result, "csv"),
        mime="text/csv",
    )
    c2.download_button(
        label="Export to Excel",
        data=to_excel(result, contract),
        file_name=export_filename(result, "xlsx"),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    return result
