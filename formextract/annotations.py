"""Classify native form widgets into extracted fields."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from .models import ExtractedField, FieldType, TextItem, WidgetAnnotation, WidgetKind, make_field
from .layout import find_nearby_label
from .radio import RadioGroupAggregator
from .utils import guess_type_from_label, normalize_options, to_title

logger = logging.getLogger(__name__)

# Some producers mark mandatory widgets with this bit instead of the Required flag.
RESERVED_REQUIRED_BIT = 1 << 14


def is_required(annotation: WidgetAnnotation) -> bool:
    return bool(annotation.required or (annotation.flags & RESERVED_REQUIRED_BIT))


def classify_widget(
    annotation: WidgetAnnotation,
    rows: Mapping[int, Sequence[TextItem]],
    radios: RadioGroupAggregator,
    band: int = 6,
    max_items: int = 6,
) -> Optional[ExtractedField]:
    """Turn one widget into a field; radios are handed to ``radios`` and yield None."""

    nearby = find_nearby_label(rows, annotation.rect, band=band, max_items=max_items)
    label = to_title(nearby or annotation.name or "Field")
    required = is_required(annotation)

    if annotation.kind == WidgetKind.TEXT:
        if annotation.multiline:
            return make_field(FieldType.TEXTAREA, label, pdf_type="multiline", required=required)
        return make_field(guess_type_from_label(label), label, pdf_type="text", required=required)

    if annotation.kind == WidgetKind.CHOICE:
        options = tuple(normalize_options(list(annotation.options)))
        if annotation.multi_select:
            return make_field(
                FieldType.MULTISELECT, label, options=options, pdf_type="listbox", required=required
            )
        pdf_type = "combobox" if annotation.combo else "select"
        return make_field(FieldType.SELECT, label, options=options, pdf_type=pdf_type, required=required)

    if annotation.kind == WidgetKind.BUTTON:
        if annotation.is_radio:
            radios.add(annotation, nearby)
            return None
        if annotation.is_checkbox:
            text = label or "Checkbox"
            return make_field(
                FieldType.CHECKBOX, text, checkbox_text=text, pdf_type="checkbox", required=required
            )
        return None

    if annotation.kind == WidgetKind.SIGNATURE:
        return make_field(FieldType.SIGNATURE, label or "Signature", pdf_type="signature", required=required)

    logger.debug("Ignoring widget of unsupported kind %r", annotation.kind)
    return None


def extract_page_fields(
    annotations: Iterable[WidgetAnnotation],
    rows: Mapping[int, Sequence[TextItem]],
    radios: RadioGroupAggregator,
    band: int = 6,
    max_items: int = 6,
) -> List[ExtractedField]:
    fields: List[ExtractedField] = []
    for annotation in annotations:
        try:
            field = classify_widget(annotation, rows, radios, band=band, max_items=max_items)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed widget %r: %s", getattr(annotation, "name", ""), exc)
            continue
        if field is not None:
            fields.append(field)
    return fields


__all__ = ["classify_widget", "extract_page_fields", "is_required"]
