"""Tests for reading real PyMuPDF widgets into annotations and fields."""

import fitz

from formextract.document import FLAG_REQUIRED, PdfDocument
from formextract.models import FieldOption, FieldType, WidgetKind
from formextract.pipeline import ExtractionSession

CHECKBOX = {"name": "i_agree", "rect": (100, 100, 112, 112), "type": fitz.PDF_WIDGET_TYPE_CHECKBOX}
COMBOBOX = {
    "name": "state",
    "rect": (100, 300, 250, 316),
    "type": fitz.PDF_WIDGET_TYPE_COMBOBOX,
    "choice_values": ["CA", "NY", "CA"],
}
PUSH_BUTTON = {"name": "submit", "rect": (100, 500, 180, 520), "type": fitz.PDF_WIDGET_TYPE_BUTTON}


def _annotations(data):
    with PdfDocument(data) as doc:
        (page,) = list(doc.pages())
        return {annotation.name: annotation for annotation in page.widgets()}


def _fields(data):
    with PdfDocument(data) as doc:
        return ExtractionSession().extract_annotations(doc)


class TestReadWidget:
    def test_button_kinds(self, pdf_factory):
        annotations = _annotations(pdf_factory(widgets=[CHECKBOX, PUSH_BUTTON]))
        checkbox = annotations["i_agree"]
        assert checkbox.kind == WidgetKind.BUTTON
        assert (checkbox.is_checkbox, checkbox.is_radio) == (True, False)
        button = annotations["submit"]
        assert button.kind == WidgetKind.BUTTON
        assert (button.is_checkbox, button.is_radio) == (False, False)

    def test_combobox_reads_options_and_combo_flag(self, pdf_factory):
        combo = _annotations(pdf_factory(widgets=[COMBOBOX]))["state"]
        assert combo.kind == WidgetKind.CHOICE
        assert combo.combo is True
        assert set(combo.options) == {"CA", "NY"}

    def test_required_flag(self, pdf_factory):
        entry = {"name": "city", "rect": (100, 100, 250, 116), "flags": FLAG_REQUIRED}
        assert _annotations(pdf_factory(widgets=[entry]))["city"].required is True


class TestWidgetFields:
    def test_checkbox_becomes_checkbox_field(self, pdf_factory):
        (field,) = _fields(pdf_factory(widgets=[CHECKBOX]))
        assert field.field_type == FieldType.CHECKBOX
        assert field.label == "I Agree"
        assert field.to_dict()["checkboxText"] == "I Agree"

    def test_combobox_becomes_select_with_unique_options(self, pdf_factory):
        (field,) = _fields(pdf_factory(widgets=[COMBOBOX]))
        assert (field.field_type, field.label, field.pdf_type) == (FieldType.SELECT, "State", "combobox")
        assert field.options == (FieldOption("CA", "CA"), FieldOption("NY", "NY"))

    def test_push_button_ignored(self, pdf_factory):
        fields = _fields(pdf_factory(widgets=[CHECKBOX, COMBOBOX, PUSH_BUTTON]))
        assert [field.field_type for field in fields] == [FieldType.CHECKBOX, FieldType.SELECT]
