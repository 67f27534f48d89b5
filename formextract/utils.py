"""Utility helpers for formextract."""

from __future__ import annotations

import json
import logging
import os
import re
from collections import Counter
from typing import Any, Iterable, List, MutableSet, Optional, Sequence

from .models import ExtractedField, FieldOption, FieldType

_TITLE_SEPARATORS = re.compile(r"[._]+")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD_START = re.compile(r"\b\w")
_SLUG_INVALID = re.compile(r"[^a-z0-9]+")

_TYPE_PATTERNS = (
    (re.compile(r"email"), FieldType.EMAIL),
    (re.compile(r"phone|tel|cell|mobile|contact number"), FieldType.PHONE),
    (re.compile(r"date|dob|birth"), FieldType.DATE),
    (re.compile(r"time"), FieldType.TIME),
    (re.compile(r"url|link|website"), FieldType.URL),
    (re.compile(r"zip|postal|age|ssn|count|qty|amount|number"), FieldType.NUMBER),
)


def configure_logging(name: str = "formextract") -> logging.Logger:
    """Apply the ``FORMEXTRACT_LOG`` level to the package logger."""

    logger = logging.getLogger(name)
    level_name = os.getenv("FORMEXTRACT_LOG", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not logger.handlers and not logging.getLogger().hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def to_title(text: Any) -> str:
    cleaned = _TITLE_SEPARATORS.sub(" ", str(text or ""))
    cleaned = _CAMEL_BOUNDARY.sub(r"\1 \2", cleaned)
    cleaned = " ".join(cleaned.split())
    return _WORD_START.sub(lambda match: match.group(0).upper(), cleaned)


def slug(text: Any) -> str:
    return _SLUG_INVALID.sub("_", str(text or "").lower()).strip("_")


def guess_type_from_label(label: str) -> FieldType:
    """Guess an input type from keywords in a human label."""

    lowered = (label or "").lower()
    for pattern, field_type in _TYPE_PATTERNS:
        if pattern.search(lowered):
            return field_type
    return FieldType.TEXT


def normalize_options(raw: Any) -> List[FieldOption]:
    """Coerce pair, mapping or scalar option shapes into unique ``FieldOption`` items."""

    if not isinstance(raw, (list, tuple)):
        return []
    options: List[FieldOption] = []
    for item in raw:
        if isinstance(item, (list, tuple)) and len(item) >= 1:
            value = str(item[0])
            label = str(item[1]) if len(item) > 1 and item[1] is not None else value
            options.append(FieldOption(value, label))
        elif isinstance(item, dict) and item:
            value = _first_present(item, ("value", "exportValue", "name"), "")
            label = _first_present(item, ("label", "displayValue"), value)
            if value:
                options.append(FieldOption(value, label))
        elif isinstance(item, (str, int, float)) and not isinstance(item, bool):
            options.append(FieldOption(str(item), str(item)))

    seen = set()
    unique: List[FieldOption] = []
    for option in options:
        key = (option.value, option.label)
        if key in seen:
            continue
        seen.add(key)
        unique.append(option)
    return unique


def _first_present(item: dict, keys: Sequence[str], default: str) -> str:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return str(value)
    return default


def assign_unique_labels(fields: Iterable[ExtractedField]) -> List[ExtractedField]:
    """Suffix repeated labels (case-insensitive) with ``2``, ``3``, ..."""

    running_counts: Counter = Counter()
    used: set = set()
    unique_fields: List[ExtractedField] = []

    for field in fields:
        base = field.label.strip() or to_title(field.field_type.value)
        key = base.lower()
        running_counts[key] += 1
        label = base
        if running_counts[key] > 1 or key in used:
            suffix = max(running_counts[key], 2)
            while f"{base} {suffix}".lower() in used:
                suffix += 1
            label = f"{base} {suffix}"
        used.add(label.lower())
        unique_fields.append(field if label == field.label else field.with_label(label))
    return unique_fields


def field_dedup_key(field: ExtractedField) -> str:
    parts = getattr(field, "parts", None)
    if field.field_type == FieldType.INLINE_TEXT and parts is not None:
        serialized = json.dumps([part.to_dict() for part in parts], separators=(",", ":"))
        return f"inline|{serialized[:80]}"
    return f"{field.field_type.value}|{field.label.lower()}"


def dedupe_fields(
    fields: Iterable[ExtractedField],
    seen: Optional[MutableSet[str]] = None,
) -> List[ExtractedField]:
    """Drop fields whose ``(type, label)`` or inline layout was already emitted."""

    seen = set() if seen is None else seen
    unique: List[ExtractedField] = []
    for field in fields:
        key = field_dedup_key(field)
        if key in seen:
            continue
        seen.add(key)
        unique.append(field)
    return unique


__all__ = [
    "assign_unique_labels",
    "configure_logging",
    "dedupe_fields",
    "field_dedup_key",
    "guess_type_from_label",
    "normalize_options",
    "slug",
    "to_title",
]
