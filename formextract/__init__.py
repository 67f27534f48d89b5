"""formextract package."""

from .classifier import LineClassifier, extract_fields_from_lines
from .config import ExtractionConfig
from .errors import (
	ExtractionError,
	NoFieldsDetectedError,
	OcrError,
	OcrFailedError,
	OcrUnavailableError,
)
from .layout import TextRows, find_nearby_label
from .models import (
	ChoiceField,
	CheckboxField,
	ExtractedField,
	FieldOption,
	FieldType,
	InlinePart,
	InlineTextField,
	TextItem,
	WidgetAnnotation,
	WidgetKind,
	make_field,
)
from .ocr import RecognitionEngine, RecognitionResult, TesseractEngine
from .pipeline import (
	ExtractionResult,
	ExtractionSession,
	build_import_payload,
	extract_fields,
	process_pdf,
)
from .radio import RadioGroupAggregator
from .utils import assign_unique_labels, configure_logging

__all__ = [
	"ChoiceField",
	"CheckboxField",
	"ExtractedField",
	"ExtractionConfig",
	"ExtractionError",
	"ExtractionResult",
	"ExtractionSession",
	"FieldOption",
	"FieldType",
	"InlinePart",
	"InlineTextField",
	"LineClassifier",
	"NoFieldsDetectedError",
	"OcrError",
	"OcrFailedError",
	"OcrUnavailableError",
	"RadioGroupAggregator",
	"RecognitionEngine",
	"RecognitionResult",
	"TesseractEngine",
	"TextItem",
	"TextRows",
	"WidgetAnnotation",
	"WidgetKind",
	"assign_unique_labels",
	"build_import_payload",
	"configure_logging",
	"extract_fields",
	"extract_fields_from_lines",
	"find_nearby_label",
	"make_field",
	"process_pdf",
]
