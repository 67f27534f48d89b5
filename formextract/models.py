"""Data models for formextract."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FieldType(str, Enum):
    """Field types understood by the form builder."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    URL = "url"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    MULTISELECT = "multiselect"
    SIGNATURE = "signature"
    HEADING = "heading"
    INLINE_TEXT = "inlineText"


CHOICE_TYPES = frozenset({FieldType.SELECT, FieldType.RADIO, FieldType.MULTISELECT})


class WidgetKind(str, Enum):
    """Form-field subtype of a widget annotation."""

    TEXT = "Tx"
    CHOICE = "Ch"
    BUTTON = "Btn"
    SIGNATURE = "Sig"


Rect = Tuple[float, float, float, float]


@dataclass(frozen=True)
class TextItem:
    """One glyph run from a page's text layer."""

    x: float
    y: float
    text: str


@dataclass(frozen=True)
class WidgetAnnotation:
    """A form widget read from one page, independent of the PDF library."""

    kind: WidgetKind
    rect: Rect
    name: str = ""
    required: bool = False
    flags: int = 0
    multiline: bool = False
    multi_select: bool = False
    combo: bool = False
    is_radio: bool = False
    is_checkbox: bool = False
    export_value: Optional[str] = None
    options: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class FieldOption:
    value: str
    label: str

    def to_dict(self) -> Dict[str, str]:
        return {"value": self.value, "label": self.label}


DEFAULT_OPTION = (FieldOption("option1", "Option 1"),)


@dataclass(frozen=True)
class InlinePart:
    """Literal text (``kind == "text"``) or a named blank (``kind == "input"``)."""

    kind: str
    value: str = ""
    input_type: str = ""
    name: str = ""

    @classmethod
    def text(cls, value: str) -> "InlinePart":
        return cls(kind="text", value=value)

    @classmethod
    def blank(cls, input_type: str, name: str) -> "InlinePart":
        return cls(kind="input", input_type=input_type, name=name)

    def to_dict(self) -> Dict[str, str]:
        if self.kind == "input":
            return {"t": "input", "inputType": self.input_type, "name": self.name}
        return {"t": "text", "v": self.value}


@dataclass(frozen=True)
class ExtractedField:
    """Canonical output record. Subclasses carry the type-specific extras."""

    field_type: FieldType
    label: str
    required: bool = False
    pdf_type: str = ""
    selected: bool = True

    def with_label(self, label: str) -> "ExtractedField":
        return replace(self, label=label)

    def with_import(self, selected: bool) -> "ExtractedField":
        return replace(self, selected=selected)

    def with_type(self, field_type: FieldType) -> "ExtractedField":
        """Return a copy re-typed by the reviewer, keeping compatible extras."""

        field_type = FieldType(field_type)
        extras: Dict[str, Any] = {}
        if field_type in CHOICE_TYPES:
            extras["options"] = getattr(self, "options", ()) or (
                DEFAULT_OPTION if field_type == FieldType.RADIO else ()
            )
        elif field_type == FieldType.CHECKBOX:
            extras["checkbox_text"] = getattr(self, "checkbox_text", None) or self.label
        elif field_type == FieldType.INLINE_TEXT:
            extras["parts"] = getattr(self, "parts", ())
        return make_field(
            field_type,
            self.label,
            required=self.required,
            pdf_type=self.pdf_type,
            selected=self.selected,
            **extras,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.field_type.value,
            "label": self.label,
            "required": self.required,
            "pdfType": self.pdf_type,
            "import": self.selected,
        }


@dataclass(frozen=True)
class ChoiceField(ExtractedField):
    """``select``, ``multiselect`` and ``radio`` fields."""

    options: Tuple[FieldOption, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["options"] = [option.to_dict() for option in self.options]
        return data


@dataclass(frozen=True)
class CheckboxField(ExtractedField):
    checkbox_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["checkboxText"] = self.checkbox_text or self.label
        return data


@dataclass(frozen=True)
class InlineTextField(ExtractedField):
    parts: Tuple[InlinePart, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["parts"] = [part.to_dict() for part in self.parts]
        return data


def make_field(field_type: FieldType, label: str, **extras: Any) -> ExtractedField:
    """Build the variant matching ``field_type``."""

    field_type = FieldType(field_type)
    common = {key: extras.pop(key) for key in ("required", "pdf_type", "selected") if key in extras}
    if field_type in CHOICE_TYPES:
        options = tuple(extras.pop("options", None) or ())
        if field_type == FieldType.RADIO and not options:
            raise ValueError("radio fields need at least one option")
        return ChoiceField(field_type, label, options=options, **common)
    if field_type == FieldType.CHECKBOX:
        return CheckboxField(field_type, label, checkbox_text=extras.pop("checkbox_text", None), **common)
    if field_type == FieldType.INLINE_TEXT:
        return InlineTextField(field_type, label, parts=tuple(extras.pop("parts", None) or ()), **common)
    return ExtractedField(field_type, label, **common)


@dataclass
class RadioGroup:
    """Accumulated options for one radio field name."""

    label: str
    options: List[FieldOption] = field(default_factory=list)

    def add(self, option: FieldOption) -> bool:
        if any(existing.value == option.value for existing in self.options):
            return False
        self.options.append(option)
        return True
