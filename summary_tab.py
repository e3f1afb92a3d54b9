# summary_tab.py
import streamlit as st

from lease_calculations import CalculationResult
from schedule_export import format_currency


def display_summary(tab, result: CalculationResult, contract):
    with tab:
        st.subheader("Calculation Summary")
        fmt = lambda value: format_currency(value, result.currency)

        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Initial Liability", fmt(result.initial_liability))
        k2.metric("Initial ROU Asset", fmt(result.initial_rou))
        k3.metric("Total Interest", fmt(result.total_interest))
        k4.metric("Total Depreciation", fmt(result.total_depreciation))

        left, right = st.columns(2)
        with left:
            st.markdown("#### Initial Recognition")
            st.markdown(f"Initial Lease Liability: **{fmt(result.initial_liability)}**")
            st.markdown(f"Initial ROU Asset: **{fmt(result.initial_rou)}**")
            st.markdown(f"Lease Term: **{contract.non_cancellable_years:g} years** ({result.period_count} periods)")
        with right:
            st.markdown("#### Total Impact")
            st.markdown(f"Total Interest Expense: **{fmt(result.total_interest)}**")
            st.markdown(f"Total Depreciation: **{fmt(result.total_depreciation)}**")
            st.markdown(f"Payment Frequency: **{contract.payment_frequency.value}**")
            st.markdown(f"Periodic Rate: **{result.periodic_rate:.6%}**")

        for anomaly in result.anomalies:
            where = f" (period {anomaly.period})" if anomaly.period else ""
            st.warning(f"{anomaly.message}{where}")
