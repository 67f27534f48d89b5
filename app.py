"""Streamlit review screen for importing fields extracted from a PDF."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import streamlit as st
from dotenv import load_dotenv

from formextract import (
    ExtractionConfig,
    ExtractionResult,
    ExtractedField,
    FieldType,
    assign_unique_labels,
    build_import_payload,
    configure_logging,
    process_pdf,
)

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

_TYPE_CHOICES = [field_type.value for field_type in FieldType]


def _init_session_state() -> None:
    defaults = {
        "uploaded_filename": None,
        "extraction": None,
        "fields": [],
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _reset_state_on_new_upload(filename: str) -> None:
    if st.session_state.uploaded_filename != filename:
        st.session_state.extraction = None
        st.session_state.fields = []
        st.session_state.uploaded_filename = filename


def _review_rows(fields: List[ExtractedField]) -> List[Dict[str, Any]]:
    rows = []
    for extracted in fields:
        options = getattr(extracted, "options", ())
        rows.append(
            {
                "Import": extracted.selected,
                "Label": extracted.label,
                "Type": extracted.field_type.value,
                "Required": extracted.required,
                "Options": ", ".join(option.label for option in options),
                "Source": extracted.pdf_type,
            }
        )
    return rows


def _apply_review(fields: List[ExtractedField], edited: Any) -> List[ExtractedField]:
    """Fold label edits, import toggles and type overrides back into the fields."""

    rows = edited.to_dict("records") if hasattr(edited, "to_dict") else list(edited)
    reviewed: List[ExtractedField] = []
    for extracted, row in zip(fields, rows):
        updated = extracted.with_import(bool(row.get("Import", True)))
        new_label = str(row.get("Label") or "").strip()
        if new_label and new_label != extracted.label:
            updated = updated.with_label(new_label)
        new_type = row.get("Type") or extracted.field_type.value
        if new_type != extracted.field_type.value:
            updated = updated.with_type(FieldType(new_type))
        reviewed.append(updated)
    return assign_unique_labels(reviewed)


def main() -> None:
    st.set_page_config(page_title="PDF Field Import", page_icon="📝", layout="wide")
    _init_session_state()

    st.title("Import Fields from PDF")
    st.caption("Fillable forms are read directly; scanned documents go through OCR. Review before importing.")

    uploaded = st.file_uploader("Upload a PDF", type=["pdf"])
    if uploaded is None:
        return
    _reset_state_on_new_upload(uploaded.name)

    if st.session_state.extraction is None:
        with st.spinner("Detecting fields..."):
            result: ExtractionResult = process_pdf(uploaded.getvalue(), config=ExtractionConfig.from_env())
        st.session_state.extraction = result
        st.session_state.fields = list(result.fields)
        logger.info("Processed %s: %d field(s), error=%s", uploaded.name, len(result.fields), result.error)

    result = st.session_state.extraction
    if result.error:
        st.error(result.error)
        return

    source = "form widgets" if result.source == "annotations" else "OCR"
    st.success(f"Detected {len(result.fields)} field(s) using {source}.")

    edited = st.data_editor(
        _review_rows(st.session_state.fields),
        column_config={
            "Import": st.column_config.CheckboxColumn("Import"),
            "Type": st.column_config.SelectboxColumn("Type", options=_TYPE_CHOICES, required=True),
        },
        disabled=["Required", "Options", "Source"],
        hide_index=True,
        key="field_review",
    )
    reviewed = _apply_review(st.session_state.fields, edited)

    payload = build_import_payload(reviewed)
    st.caption(f"{len(payload)} of {len(reviewed)} field(s) selected for import.")
    st.download_button(
        label="Download import JSON",
        data=json.dumps({"fields": payload}, indent=2),
        file_name=f"{Path(uploaded.name).stem or 'form'}-fields.json",
        mime="application/json",
        disabled=not payload,
    )


if __name__ == "__main__":
    main()
