# schedules_tab.py
import streamlit as st

from schedule_export import amortization_frame, cashflow_frame


def display_cashflow(tab, result):
    with tab:
        st.subheader("Cashflow Schedule")
        st.dataframe(cashflow_frame(result), hide_index=True, use_container_width=True)
        st.caption(f"Undiscounted payments total {result.currency} {result.total_payments:,.2f}")


def display_amortization(tab, result):
    with tab:
        st.subheader("Amortization Schedule")
        st.dataframe(amortization_frame(result), hide_index=True, use_container_width=True)
