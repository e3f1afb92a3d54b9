# qa_tab.py
import streamlit as st

from qa_checks import run_ifrs16_checks


def display_qa(tab, result):
    with tab:
        st.subheader("Quality Assurance Checks")

        failures = run_ifrs16_checks(result)
        final = result.amortization_schedule[-1]

        st.markdown("Liability amortizes to zero: " + ("✅ PASS" if abs(final.remaining_liability) < 0.01 else "❌ FAIL"))
        st.markdown("ROU asset depreciates to zero: " + ("✅ PASS" if abs(final.remaining_asset) < 0.01 else "❌ FAIL"))
        st.markdown("Schedule identities hold: " + ("✅ PASS" if not failures else "❌ FAIL"))
        for failure in failures:
            st.error(failure)
