"""Tests for folding review-table edits back into extracted fields."""

from app import _apply_review, _review_rows
from formextract.models import FieldOption, FieldType, make_field


def _fields():
    return [
        make_field(FieldType.TEXT, "Full Name"),
        make_field(FieldType.SELECT, "State", options=(FieldOption("CA", "CA"),)),
    ]


class TestApplyReview:
    def test_unchanged_rows_keep_fields(self):
        fields = _fields()
        assert _apply_review(fields, _review_rows(fields)) == fields

    def test_label_edit(self):
        fields = _fields()
        rows = _review_rows(fields)
        rows[0]["Label"] = "  Legal Name "
        reviewed = _apply_review(fields, rows)
        assert reviewed[0].label == "Legal Name"
        assert reviewed[1] == fields[1]

    def test_blank_label_edit_is_ignored(self):
        fields = _fields()
        rows = _review_rows(fields)
        rows[0]["Label"] = "   "
        assert _apply_review(fields, rows)[0].label == "Full Name"

    def test_edited_labels_stay_unique(self):
        fields = _fields()
        rows = _review_rows(fields)
        rows[1]["Label"] = "full name"
        assert [field.label for field in _apply_review(fields, rows)] == ["Full Name", "full name 2"]

    def test_import_toggle_and_type_override(self):
        fields = _fields()
        rows = _review_rows(fields)
        rows[0]["Import"] = False
        rows[0]["Label"] = "Gender"
        rows[0]["Type"] = "radio"
        (first, _) = _apply_review(fields, rows)
        assert first.selected is False
        assert first.field_type == FieldType.RADIO
        assert first.label == "Gender"
        assert first.options == (FieldOption("option1", "Option 1"),)
