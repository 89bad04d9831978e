import os
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import streamlit as st

from gs1_scanlog.core.classifier import UNIDENTIFIED, load_rules
from gs1_scanlog.pipeline import handle_scan
from gs1_scanlog.reports import export_csv, export_excel, export_pdf, records_to_dataframe
from gs1_scanlog.settings import DEFAULT_SETTINGS, configure_logging, load_settings, save_settings
from gs1_scanlog.storage import ScanStore
from gs1_scanlog.utils import expiry_status, timestamp_slug


SETTINGS_PATH = Path(os.getenv("GS1_SCANLOG_SETTINGS", "settings.json"))


def _ensure_session_state():
    if "last_outcome" not in st.session_state:
        st.session_state.last_outcome = None


@st.cache_resource
def _get_store(path: str) -> ScanStore:
    return ScanStore(path)


@st.cache_resource
def _get_rules(path: str):
    return load_rules(path or None)


def _status_badge(status: str) -> str:
    if status == "Valid":
        return "✅ Valid"
    if status == "Near Expiry":
        return "⚠️ Near Expiry"
    if status == "Expired":
        return "❌ Expired"
    return "❔ Unknown"


def _render_outcome(outcome, settings: dict):
    if outcome is None:
        return

    st.markdown("### Scan Result")
    st.markdown(f"**Provider:** {outcome.provider_label}")

    if outcome.record is None:
        st.info("No data in scan.")
        return
    if outcome.duplicate:
        st.warning("This item is already in the scan log.")
    elif outcome.accepted:
        st.success("Scan logged.")

    for item in outcome.interpreted:
        text = f"**{item.label}:** {item.display}"
        if item.is_expired:
            text = f"**{item.label}:** :red[{item.display}]"
        elif item.expiry and item.parsed_date is not None:
            status = expiry_status(item.parsed_date, settings["near_expiry_months"])
            text += f" {_status_badge(status)}"
        st.markdown(text)
        for error in item.errors:
            st.caption(f"⚠️ {error}")

    if outcome.decoded.warnings:
        with st.expander("Decoder warnings"):
            for warning in outcome.decoded.warnings:
                st.write(f"[{warning.code}] {warning.message}")


def _scan_page(settings: dict, store: ScanStore, rules):
    st.header("Scan")

    providers = ["Automatic"] + [rule.provider for rule in rules]
    current = settings.get("provider_override") or "Automatic"
    override = st.selectbox(
        "Provider",
        providers,
        index=providers.index(current) if current in providers else 0,
        help="Pick a provider to skip automatic identification",
    )

    with st.form("scan_form", clear_on_submit=True):
        scan_text = st.text_input(
            "Scan Input",
            placeholder="Scan barcode here",
            help="Scanner input",
            key="scan_input",
        )
        submitted = st.form_submit_button("Parse (Enter)")

    if submitted:
        st.session_state.last_outcome = handle_scan(
            store,
            scan_text,
            rules=rules,
            now=datetime.now(timezone.utc),
            provider_override=None if override == "Automatic" else override,
        )

    _render_outcome(st.session_state.last_outcome, settings)


def _log_page(settings: dict, store: ScanStore):
    st.header("Scan Log")
    records = store.list()
    if not records:
        st.info("No scans yet.")
        return

    columns = list(settings["export_columns"])
    df = records_to_dataframe(records, columns)
    df.insert(0, "#", range(len(df)))
    st.dataframe(df, use_container_width=True, hide_index=True)

    providers = pd.Series([r.provider for r in records]).value_counts()
    col1, col2, col3 = st.columns(3)
    col1.metric("Scans", len(records))
    col2.metric("Providers", len(providers))
    col3.metric("Unidentified", int(providers.get(UNIDENTIFIED, 0)))

    st.markdown("### Delete")
    col1, col2 = st.columns([1, 3])
    index = col1.number_input("Row #", min_value=0, max_value=len(records) - 1, step=1, value=0)
    if col2.button("Delete row"):
        store.remove(int(index))
        st.success(f"Deleted row {int(index)}.")
        st.rerun()

    st.markdown("### Export")
    export_df = records_to_dataframe(records, columns)
    export_dir = settings["export_dir"]
    slug = timestamp_slug()
    col1, col2, col3 = st.columns(3)
    if col1.button("CSV"):
        path = export_csv(export_df, f"scans_{slug}.csv", export_dir)
        col1.download_button("Download CSV", path.read_bytes(), file_name=path.name, mime="text/csv")
    if col2.button("Excel"):
        path = export_excel(export_df, f"scans_{slug}.xlsx", export_dir)
        col2.download_button(
            "Download Excel",
            path.read_bytes(),
            file_name=path.name,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    if col3.button("PDF"):
        path = export_pdf("GS1 Scan Log", export_df, f"scans_{slug}.pdf", export_dir, metadata={"Scans": str(len(export_df))})
        col3.download_button("Download PDF", path.read_bytes(), file_name=path.name, mime="application/pdf")

    if st.button("Clear log"):
        store.clear()
        st.rerun()


def _settings_page(settings: dict, rules):
    st.header("Settings")
    providers = [""] + [rule.provider for rule in rules]
    current = settings.get("provider_override", "")
    with st.form("settings_form"):
        near_expiry_months = st.number_input("Near Expiry threshold (months)", min_value=1, step=1, value=int(settings["near_expiry_months"]))
        export_columns = st.text_input("Export columns (AIs)", value=",".join(settings["export_columns"]))
        provider_override = st.selectbox(
            "Default provider (empty = automatic)",
            providers,
            index=providers.index(current) if current in providers else 0,
        )
        store_path = st.text_input("Scan log file", value=settings["store_path"])
        rules_path = st.text_input("Provider rules file (empty = built-in)", value=settings["rules_path"])
        export_dir = st.text_input("Export directory", value=settings["export_dir"])
        log_level = st.selectbox("Log level", ["DEBUG", "INFO", "WARNING", "ERROR"], index=["DEBUG", "INFO", "WARNING", "ERROR"].index(settings["log_level"]) if settings["log_level"] in ["DEBUG", "INFO", "WARNING", "ERROR"] else 1)
        saved = st.form_submit_button("Save Settings")

    if saved:
        save_settings(
            SETTINGS_PATH,
            {
                "near_expiry_months": int(near_expiry_months),
                "export_columns": [c.strip() for c in export_columns.split(",") if c.strip()] or DEFAULT_SETTINGS["export_columns"],
                "provider_override": provider_override,
                "store_path": store_path,
                "rules_path": rules_path,
                "export_dir": export_dir,
                "log_level": log_level,
            },
        )
        st.success("Settings saved.")
        st.info("File path changes take effect on next app restart.")


def main():
    _ensure_session_state()
    settings = load_settings(SETTINGS_PATH)
    configure_logging(settings["log_level"])
    store = _get_store(settings["store_path"])
    rules = _get_rules(settings["rules_path"])

    st.sidebar.title("Navigation")
    page = st.sidebar.radio("Go to", ["Scan", "Scan Log", "Settings"])

    if page == "Scan":
        _scan_page(settings, store, rules)
    elif page == "Scan Log":
        _log_page(settings, store)
    elif page == "Settings":
        _settings_page(settings, rules)


st.set_page_config(page_title="GS1 Scan Log", layout="wide")

if __name__ == "__main__":
    main()
