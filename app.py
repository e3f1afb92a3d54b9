from dataclasses import asdict

import streamlit as st

from input_sidebar import get_user_inputs
from lease_config import EngineConfig, configure_logging
from lease_import import ImportMappingError, parse_cpi_observations, read_contracts
from model_engine import build_contract, run_ifrs16_model

configure_logging()
config = EngineConfig.from_env()

st.set_page_config("IFRS 16 Lease Model", layout="wide")
st.title("📘 Lease Liability & ROU Engine")
st.info("IFRS 16 calculations and amortization schedules. Enter a lease or import contracts from Excel/CSV.")

if "contracts" not in st.session_state:
    st.session_state["contracts"] = {}

# --- Bulk Import ---
with st.sidebar:
    st.header("Import Contracts")
    upload = st.file_uploader("Excel (.xlsx, .xls) or CSV", type=["xlsx", "xls", "csv"])
    if upload is not None and st.button("Import"):
        try:
            report = read_contracts(upload, filename=upload.name, config=config)
        except ValueError as e:
            st.error(str(e))
        else:
            for contract in report.contracts:
                st.session_state["contracts"][contract.contract_id] = contract
            st.success(f"Successfully imported {report.imported} contract{'s' if report.imported != 1 else ''}!")
            for error in report.errors:
                st.warning(f"Row {error.row}: {error}")

    # --- Contract Selection ---
    saved = st.session_state["contracts"]
    selected_id = st.selectbox("Select a Contract", ["(new contract)"] + sorted(saved))

selected = st.session_state["contracts"].get(selected_id)
submitted, contract_inputs, cpi_observations = get_user_inputs(
    asdict(selected) if selected else {"currency": config.default_currency}
)

if submitted:
    contract = build_contract(contract_inputs)
    if contract is not None:
        st.session_state["contracts"][contract.contract_id] = contract
        try:
            cpi_index = parse_cpi_observations(cpi_observations)
        except ImportMappingError as e:
            st.error(str(e))
        else:
            run_ifrs16_model(contract, cpi_index=cpi_index or None, config=config)
