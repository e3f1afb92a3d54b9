# input_sidebar.py

import streamlit as st
from datetime import date

from lease_contract import EscalationType, PaymentFrequency, PaymentTiming


def get_user_inputs(defaults=None):
    """Lease form; returns the submit flag, LeaseContract keyword arguments and raw CPI observations."""
    d = defaults or {}
    st.header("Lease Details")

    with st.form("lease_input_form"):
        # --- Identity ---
        contract_id = st.text_input("Contract ID", value=d.get("contract_id", "LC-2024-001"))
        lessee_entity = st.text_input("Lessee Entity", value=d.get("lessee_entity", ""))
        lessor_name = st.text_input("Lessor Name", value=d.get("lessor_name", ""))
        asset_description = st.text_input("Asset Description", value=d.get("asset_description", ""))
        currency = st.text_input("Currency", value=d.get("currency", "NGN"))

        # --- Term & payments ---
        commencement_date = st.date_input("Commencement Date", value=d.get("commencement_date", date.today()))
        non_cancellable_years = st.number_input(
            "Non-cancellable Term (years)", min_value=0.0, value=float(d.get("non_cancellable_years", 3.0)), step=0.25
        )
        fixed_payment = st.number_input(
            "Fixed Payment per Period", min_value=0.0,
            value=float(d.get("fixed_payment_per_period", 1000000.0)), step=1000.0
        )
        frequencies = [f.value for f in PaymentFrequency]
        payment_frequency = st.selectbox(
            "Payment Frequency", frequencies,
            index=frequencies.index(_label(d.get("payment_frequency"), PaymentFrequency.MONTHLY))
        )
        timings = [t.value for t in PaymentTiming]
        payment_timing = st.selectbox(
            "Payment Timing", timings,
            index=timings.index(_label(d.get("payment_timing"), PaymentTiming.ARREARS))
        )
        ibr_percent = st.number_input(
            "IBR (annual %)", min_value=0.0, max_value=99.99,
            value=float(d.get("ibr_annual", 0.12)) * 100, step=0.01
        )

        # --- ROU adjustments ---
        st.markdown("### Right-of-use Adjustments")
        initial_direct_costs = st.number_input(
            "Initial Direct Costs", min_value=0.0, value=float(d.get("initial_direct_costs", 0.0)), step=1.0
        )
        prepayments = st.number_input(
            "Prepayments before Commencement", min_value=0.0,
            value=float(d.get("prepayments_before_commencement", 0.0)), step=1.0
        )
        lease_incentives = st.number_input(
            "Lease Incentives", min_value=0.0, value=float(d.get("lease_incentives", 0.0)), step=1.0
        )
        purchase_option = st.checkbox(
            "Purchase option reasonably certain (ownership transfer)?",
            value=bool(d.get("purchase_option_reasonably_certain", False))
        )
        useful_life = st.number_input(
            "Useful Life (years, 0 = not specified)", min_value=0.0,
            value=float(d.get("useful_life_years") or 0.0), step=0.5
        )

        # --- Escalation ---
        st.markdown("### Escalation")
        escalation_types = [e.value for e in EscalationType]
        escalation_type = st.selectbox(
            "Escalation Type", escalation_types,
            index=escalation_types.index(_label(d.get("escalation_type"), EscalationType.NONE))
        )
        escalation_pct = st.number_input(
            "Fixed Escalation (% per year)", min_value=0.0,
            value=float(d.get("fixed_escalation_pct", 0.0)) * 100, step=0.1
        )
        first_reset_offset = st.number_input(
            "First Reset Year Offset", min_value=0, value=int(d.get("first_reset_year_offset", 0)), step=1
        )
        base_cpi = st.number_input("Base CPI", min_value=0.0, value=float(d.get("base_cpi") or 100.0), step=0.1)
        cpi_reset_month = st.number_input(
            "CPI Reset Month (0 = lease anniversary)", min_value=0, max_value=12,
            value=int(d.get("cpi_reset_month") or 0), step=1
        )

        cpi_observations = st.text_area(
            "CPI Observations (one `period=index` per line, needed at each CPI reset)", value=""
        )

        submitted = st.form_submit_button("Calculate")

    contract_inputs = {
        "contract_id": contract_id,
        "lessee_entity": lessee_entity,
        "lessor_name": lessor_name,
        "asset_description": asset_description,
        "currency": currency,
        "commencement_date": commencement_date,
        "non_cancellable_years": non_cancellable_years,
        "fixed_payment_per_period": fixed_payment,
        "payment_frequency": payment_frequency,
        "payment_timing": payment_timing,
        "ibr_annual": ibr_percent / 100,
        "initial_direct_costs": initial_direct_costs,
        "prepayments_before_commencement": prepayments,
        "lease_incentives": lease_incentives,
        "purchase_option_reasonably_certain": purchase_option,
        "useful_life_years": useful_life or None,
        "escalation_type": escalation_type,
        "fixed_escalation_pct": escalation_pct / 100,
        "first_reset_year_offset": int(first_reset_offset),
        "base_cpi": base_cpi if escalation_type == EscalationType.CPI.value else None,
        "cpi_reset_month": int(cpi_reset_month) or None,
    }

    return submitted, contract_inputs, cpi_observations


def _label(value, default):
    if value is None:
        return default.value
    return getattr(value, "value", value)
