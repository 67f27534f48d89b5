"""Heuristic classification of recognised text lines into form fields.

Lines are scanned once, front to back. At each position the rules are
tried in order and the first one that matches emits its fields and says
how many lines it consumed. A line no rule wants is skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import ExtractedField, FieldOption, FieldType, InlinePart, make_field
from .utils import guess_type_from_label, slug, to_title

logger = logging.getLogger(__name__)

_LONG_DASHES = re.compile("[—―─]")
_SPACED_UNDERSCORES = re.compile(r"_\s*_")
_BLANK_RUN = re.compile(r"_{3,}")
_SIMPLE_LABEL_BLANK = re.compile(r"^\s*[A-Za-z][A-Za-z0-9 /#&'().-]{0,60}:?\s*_{3,}\s*$")
_INLINE_LABEL_TAIL = re.compile(r"([A-Za-z][A-Za-z\s/\-#]+)$")
_MULTI_SPACE = re.compile(r"\s{2,}")

_SIGNATURE = re.compile(r"signature", re.IGNORECASE)
_SIGNATURE_WORD = re.compile(r"\bsignature\b", re.IGNORECASE)
_SIGNATURE_DECOYS = re.compile(r"\bdesign|policy|waiver", re.IGNORECASE)
_DATE = re.compile(r"date", re.IGNORECASE)
_WITNESS_SIGNATURE = re.compile(r"witness\s*signature", re.IGNORECASE)
_STUDENT_SIGNATURE = re.compile(r"student.*signature", re.IGNORECASE)
_WITNESS = re.compile(r"witness", re.IGNORECASE)
_STUDENT = re.compile(r"student", re.IGNORECASE)
_WITNESS_OR_DIRECTOR = re.compile(r"witness|director", re.IGNORECASE)
_PRINTED_NAME = re.compile(r"printed\s+name", re.IGNORECASE)
_PHONE = re.compile(r"\bPhone\s*:", re.IGNORECASE)
_ALTERNATE_PHONE = re.compile(r"\bAlternate\s+Phone\s*:", re.IGNORECASE)
_YES_NO = re.compile(r"\bYes\b.*\bNo\b", re.IGNORECASE)
_YES = re.compile(r"\bYes\b", re.IGNORECASE)
_QUESTION_NUMBERING = re.compile(r"^[()\d.\s]+")
_QUESTION_TAIL = re.compile(r"[:?]+$")
_CHECKBOX_LINE = re.compile(r"(^|\s)(\[\s?\]|☐|■|□|◻|⧠)\s*\S")
_CHECKBOX_GLYPH = re.compile(r"(^|\s)(\[\s?\]|☐|■|□|◻|⧠)\s*")
_COLON_LABEL = re.compile(r"^\s*([A-Za-z0-9][^:]{1,80}?)\s*:\s*(.*)$")
_UNDERLINE_LABEL = re.compile(r"^\s*([A-Za-z0-9][^_\-]{1,80}?)\s*[_\-]{4,}\s*$")
_GENDER = re.compile(r"\b(gender|sex)\b", re.IGNORECASE)
_GENDER_SPLIT = re.compile(r"[\s/|]+")
_GENDER_TOKEN = re.compile(r"^(male|female|other|non-?binary)$", re.IGNORECASE)
_HEADING = re.compile(r"^[A-Z0-9][A-Z0-9\s,&\-]{6,}$")
_HEADING_PUNCTUATION = re.compile(r"[.:]")

MAX_HEADING_LENGTH = 48
MIN_CHECKBOX_OPTIONS = 2
MIN_GENDER_OPTIONS = 2


@dataclass(frozen=True)
class RuleMatch:
    fields: Tuple[ExtractedField, ...]
    consumed: int = 1


Rule = Callable[[Sequence[str], int], Optional[RuleMatch]]


def _match(*fields: ExtractedField, consumed: int = 1) -> RuleMatch:
    return RuleMatch(fields=tuple(fields), consumed=consumed)


def _role_signature(line: str) -> str:
    if _WITNESS.search(line):
        return "Witness Signature"
    if _STUDENT.search(line):
        return "Student Signature"
    return "Signature"


def _labelled_field(label: str, pdf_type: str) -> ExtractedField:
    field_type = FieldType.SIGNATURE if _SIGNATURE.search(label) else guess_type_from_label(label)
    return make_field(field_type, label, pdf_type=pdf_type)


def build_inline_parts(raw: str) -> Optional[Tuple[InlinePart, ...]]:
    """Split a line with underscore blanks into literal text and named inputs."""

    line = _LONG_DASHES.sub("_", raw)
    if _SIGNATURE.search(line):
        return None
    if not _SPACED_UNDERSCORES.search(line) and not _BLANK_RUN.search(line):
        return None
    if _SIMPLE_LABEL_BLANK.match(line) and (_COLON_LABEL.match(line) or _UNDERLINE_LABEL.match(line)):
        return None

    parts: List[InlinePart] = []
    name_counts: Dict[str, int] = {}
    last_index = 0
    for blank in _BLANK_RUN.finditer(line):
        before = line[last_index:blank.start()]
        if before:
            parts.append(InlinePart.text(before))
        left = " ".join(before.strip().split()[-3:]).rstrip(": ")
        label_match = _INLINE_LABEL_TAIL.search(left)
        label = to_title(label_match.group(1).strip() if label_match else "Field")
        lowered = label.lower()
        if "date" in lowered:
            input_type = FieldType.DATE.value
        elif "phone" in lowered or "tel" in lowered:
            input_type = FieldType.PHONE.value
        else:
            input_type = FieldType.TEXT.value
        base = slug(label) or f"inline_{len(parts)}"
        name_counts[base] = name_counts.get(base, 0) + 1
        name = f"{base}_{name_counts[base]}" if name_counts[base] > 1 else base
        parts.append(InlinePart.blank(input_type, name))
        last_index = blank.end()
    tail = line[last_index:]
    if tail:
        parts.append(InlinePart.text(tail))

    cleaned = tuple(
        InlinePart.text(_MULTI_SPACE.sub(" ", part.value)) if part.kind == "text" else part
        for part in parts
        if part.kind != "text" or part.value.strip()
    )
    if not any(part.kind == "input" for part in cleaned):
        return None
    return cleaned


def match_inline_blank(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    parts = build_inline_parts(lines[index])
    if parts is None:
        return None
    return _match(make_field(FieldType.INLINE_TEXT, "", parts=parts, pdf_type="ocr-inline"))


def match_dual_phone(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not (_PHONE.search(line) and _ALTERNATE_PHONE.search(line)):
        return None
    return _match(
        make_field(FieldType.PHONE, "Phone", pdf_type="ocr-label"),
        make_field(FieldType.PHONE, "Alternate Phone", pdf_type="ocr-label"),
    )


def match_signature_date(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not (_SIGNATURE.search(line) and _DATE.search(line)):
        return None
    if _WITNESS_SIGNATURE.search(line):
        label = "Witness Signature"
    elif _STUDENT_SIGNATURE.search(line):
        label = "Student Signature"
    else:
        label = "Signature"
    return _match(
        make_field(FieldType.SIGNATURE, label, pdf_type="ocr-signature"),
        make_field(FieldType.DATE, "Date", pdf_type="ocr-date"),
    )


def match_printed_name(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not _PRINTED_NAME.search(line):
        return None
    if _STUDENT.search(line):
        label = "Student Printed Name"
    elif _WITNESS_OR_DIRECTOR.search(line):
        label = "Witness/Director Printed Name"
    else:
        label = "Printed Name"
    return _match(make_field(FieldType.TEXT, label, pdf_type="ocr-label"))


def match_signature(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not _SIGNATURE_WORD.search(line) or _SIGNATURE_DECOYS.search(line):
        return None
    return _match(make_field(FieldType.SIGNATURE, _role_signature(line), pdf_type="ocr-signature"))


def match_yes_no(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not _YES_NO.search(line):
        return None
    question = _QUESTION_NUMBERING.sub("", _YES.split(line, maxsplit=1)[0]).strip()
    if len(question) < 3:
        return None
    options = (FieldOption("yes", "Yes"), FieldOption("no", "No"))
    return _match(
        make_field(FieldType.RADIO, _QUESTION_TAIL.sub("", question), options=options, pdf_type="ocr-yesno")
    )


def match_checkbox_group(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    if not _CHECKBOX_LINE.search(lines[index]):
        return None
    options: List[FieldOption] = []
    cursor = index
    while cursor < len(lines):
        line = lines[cursor].strip()
        if not _CHECKBOX_LINE.search(line):
            break
        text = _CHECKBOX_GLYPH.sub(" ", line).strip()
        if text:
            options.append(FieldOption(value="_".join(text.lower().split()), label=text))
        cursor += 1
    if len(options) < MIN_CHECKBOX_OPTIONS:
        return None
    field = make_field(FieldType.MULTISELECT, "Select Options", options=tuple(options), pdf_type="ocr-checkboxes")
    return _match(field, consumed=cursor - index)


def match_label(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    colon = _COLON_LABEL.match(line)
    if colon:
        return _match(_labelled_field(to_title(colon.group(1)), "ocr-label"))
    underline = _UNDERLINE_LABEL.match(line)
    if underline:
        return _match(_labelled_field(to_title(underline.group(1)), "ocr-underline"))
    return None


def match_gender(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    if not _GENDER.search(lines[index]) or index + 1 >= len(lines):
        return None
    tokens = [token for token in _GENDER_SPLIT.split(lines[index + 1].strip()) if token]
    candidates = [token for token in tokens if _GENDER_TOKEN.match(token)]
    if len(candidates) < MIN_GENDER_OPTIONS:
        return None
    options = tuple(FieldOption(token.lower(), to_title(token)) for token in candidates)
    return _match(make_field(FieldType.RADIO, "Gender", options=options, pdf_type="ocr-radio"), consumed=2)


def match_heading(lines: Sequence[str], index: int) -> Optional[RuleMatch]:
    line = lines[index]
    if not _HEADING.match(line) or _HEADING_PUNCTUATION.search(line):
        return None
    text = " ".join(line.split())
    if len(text) > MAX_HEADING_LENGTH:
        return None
    label = " ".join(word.capitalize() for word in text.split(" "))
    return _match(make_field(FieldType.HEADING, label, pdf_type="ocr-heading"))


DEFAULT_RULES: Tuple[Tuple[str, Rule], ...] = (
    ("inline-blank", match_inline_blank),
    ("dual-phone", match_dual_phone),
    ("signature-date", match_signature_date),
    ("printed-name", match_printed_name),
    ("signature", match_signature),
    ("yes-no", match_yes_no),
    ("checkbox-group", match_checkbox_group),
    ("label", match_label),
    ("gender", match_gender),
    ("heading", match_heading),
)


class LineClassifier:
    """Runs an ordered rule list over recognised lines."""

    def __init__(self, rules: Sequence[Tuple[str, Rule]] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def match_line(self, lines: Sequence[str], index: int) -> Tuple[Optional[str], RuleMatch]:
        for name, rule in self.rules:
            result = rule(lines, index)
            if result is not None:
                return name, result
        return None, RuleMatch(fields=(), consumed=1)

    def classify(self, raw_lines: Sequence[str]) -> List[ExtractedField]:
        lines = [line.strip() for line in raw_lines if isinstance(line, str)]
        fields: List[ExtractedField] = []
        index = 0
        while index < len(lines):
            name, result = self.match_line(lines, index)
            if name is not None:
                logger.debug("Line %d matched %s: %r", index, name, lines[index])
            for field in result.fields:
                _push_unique(fields, field)
            index += max(1, result.consumed)
        return fields


def _push_unique(fields: List[ExtractedField], field: ExtractedField) -> None:
    if field.field_type == FieldType.INLINE_TEXT:
        fields.append(field)
        return
    key = field.label.lower()
    if not key:
        return
    if any(existing.label.lower() == key and existing.field_type == field.field_type for existing in fields):
        return
    fields.append(field)


def extract_fields_from_lines(lines: Sequence[str]) -> List[ExtractedField]:
    return LineClassifier().classify(lines)


__all__ = [
    "DEFAULT_RULES",
    "LineClassifier",
    "RuleMatch",
    "build_inline_parts",
    "extract_fields_from_lines",
]
