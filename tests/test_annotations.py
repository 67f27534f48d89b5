"""Tests for widget classification and radio aggregation."""

from formextract.annotations import classify_widget, extract_page_fields, is_required
from formextract.layout import TextRows
from formextract.models import FieldOption, FieldType, TextItem, WidgetAnnotation, WidgetKind
from formextract.radio import RadioGroupAggregator


def _rows(*items):
    return TextRows(TextItem(x, y, text) for x, y, text in items)


def _widget(kind=WidgetKind.TEXT, rect=(100, 90, 250, 104), **kwargs):
    return WidgetAnnotation(kind=kind, rect=rect, **kwargs)


class TestTextWidgets:
    def test_email_scenario(self):
        rows = _rows((40, 97, "Email:"))
        field = classify_widget(_widget(name="email_addr"), rows, RadioGroupAggregator())
        assert field.field_type == FieldType.EMAIL
        assert field.label == "Email"
        assert field.pdf_type == "text"

    def test_multiline_is_always_textarea(self):
        for text in ("Email:", "Date of Birth", "Phone"):
            rows = _rows((40, 97, text))
            field = classify_widget(_widget(multiline=True), rows, RadioGroupAggregator())
            assert field.field_type == FieldType.TEXTAREA
            assert field.pdf_type == "multiline"

    def test_falls_back_to_title_cased_name(self):
        field = classify_widget(_widget(name="home_phone"), _rows(), RadioGroupAggregator())
        assert field.label == "Home Phone"
        assert field.field_type == FieldType.PHONE

    def test_falls_back_to_generic_label(self):
        field = classify_widget(_widget(), _rows(), RadioGroupAggregator())
        assert field.label == "Field"


class TestRequired:
    def test_explicit_flag(self):
        assert is_required(_widget(required=True))

    def test_reserved_bit(self):
        assert is_required(_widget(flags=1 << 14))

    def test_not_required(self):
        assert not is_required(_widget(flags=1 << 12))


class TestChoiceWidgets:
    def test_select_with_normalized_options(self):
        options = (["a", "Alpha"], {"value": "b", "label": "Beta"}, "c", ["a", "Alpha"])
        field = classify_widget(
            _widget(kind=WidgetKind.CHOICE, name="colour", options=options, combo=True),
            _rows(),
            RadioGroupAggregator(),
        )
        assert field.field_type == FieldType.SELECT
        assert field.pdf_type == "combobox"
        assert field.options == (FieldOption("a", "Alpha"), FieldOption("b", "Beta"), FieldOption("c", "c"))

    def test_multi_select_listbox(self):
        field = classify_widget(
            _widget(kind=WidgetKind.CHOICE, multi_select=True), _rows(), RadioGroupAggregator()
        )
        assert field.field_type == FieldType.MULTISELECT
        assert field.pdf_type == "listbox"
        assert field.options == ()

    def test_plain_select(self):
        field = classify_widget(_widget(kind=WidgetKind.CHOICE), _rows(), RadioGroupAggregator())
        assert field.pdf_type == "select"


class TestButtonWidgets:
    def test_checkbox_uses_label_as_text(self):
        rows = _rows((40, 97, "I agree"))
        field = classify_widget(
            _widget(kind=WidgetKind.BUTTON, is_checkbox=True, required=True), rows, RadioGroupAggregator()
        )
        assert field.field_type == FieldType.CHECKBOX
        assert field.checkbox_text == "I Agree"
        assert field.required is True

    def test_push_button_ignored(self):
        assert classify_widget(_widget(kind=WidgetKind.BUTTON), _rows(), RadioGroupAggregator()) is None

    def test_signature(self):
        field = classify_widget(_widget(kind=WidgetKind.SIGNATURE, name="sig1"), _rows(), RadioGroupAggregator())
        assert field.field_type == FieldType.SIGNATURE
        assert field.label == "Sig1"


class TestRadioGroups:
    def test_gender_scenario(self):
        rows = _rows((40, 200, "Male"), (40, 220, "Female"))
        radios = RadioGroupAggregator()
        widgets = [
            _widget(WidgetKind.BUTTON, (60, 194, 72, 206), name="gender", is_radio=True, export_value="m"),
            _widget(WidgetKind.BUTTON, (60, 214, 72, 226), name="gender", is_radio=True, export_value="f"),
        ]
        assert extract_page_fields(widgets, rows, radios) == []
        (field,) = radios.finalize()
        assert field.field_type == FieldType.RADIO
        assert field.label == "Gender"
        assert field.options == (FieldOption("m", "Male"), FieldOption("f", "Female"))

    def test_duplicate_export_values_suppressed_in_order(self):
        radios = RadioGroupAggregator()
        for value in ("b", "a", "b", "c", "a"):
            radios.add(_widget(WidgetKind.BUTTON, name="choice", is_radio=True, export_value=value))
        (field,) = radios.finalize()
        assert [option.value for option in field.options] == ["b", "a", "c"]
        assert [option.label for option in field.options] == ["B", "A", "C"]

    def test_groups_kept_in_first_seen_order(self):
        radios = RadioGroupAggregator()
        radios.add(_widget(WidgetKind.BUTTON, name="second_group", is_radio=True, export_value="x"))
        radios.add(_widget(WidgetKind.BUTTON, name="first", is_radio=True, export_value="y"))
        radios.add(_widget(WidgetKind.BUTTON, name="second_group", is_radio=True, export_value="z"))
        assert [field.label for field in radios.finalize()] == ["Second Group", "First"]

    def test_unnamed_widget_without_export_value(self):
        radios = RadioGroupAggregator()
        radios.add(_widget(WidgetKind.BUTTON, is_radio=True))
        (field,) = radios.finalize()
        assert field.label == "Radio Group"
        assert field.options == (FieldOption("on", "On"),)


class TestExtractPageFields:
    def test_malformed_annotation_skipped(self):
        rows = _rows((40, 97, "Name"))
        fields = extract_page_fields([object(), _widget(name="name")], rows, RadioGroupAggregator())
        assert [field.label for field in fields] == ["Name"]

    def test_preserves_widget_order(self):
        widgets = [
            _widget(name="first_name"),
            _widget(kind=WidgetKind.SIGNATURE, name="signature"),
            _widget(kind=WidgetKind.BUTTON, name="news", is_checkbox=True),
        ]
        fields = extract_page_fields(widgets, _rows(), RadioGroupAggregator())
        assert [field.field_type for field in fields] == [FieldType.TEXT, FieldType.SIGNATURE, FieldType.CHECKBOX]
