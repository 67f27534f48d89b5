"""High level orchestration of PDF field extraction."""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .annotations import extract_page_fields
from .classifier import LineClassifier
from .config import ExtractionConfig
from .document import PdfDocument, PdfSource
from .errors import NoFieldsDetectedError, OcrError, OcrFailedError
from .layout import TextRows
from .models import CHOICE_TYPES, DEFAULT_OPTION, ExtractedField, FieldType
from .ocr import RecognitionEngine, TesseractEngine
from .radio import RadioGroupAggregator
from .utils import assign_unique_labels, dedupe_fields

logger = logging.getLogger(__name__)

OCR_FAILED_MESSAGE = "OCR failed to extract fields."
NO_FIELDS_MESSAGE = "No fields detected. Try a different PDF or adjust OCR."
PROCESSING_FAILED_MESSAGE = "Failed to process PDF. Please try again."

SOURCE_ANNOTATIONS = "annotations"
SOURCE_OCR = "ocr"


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of :func:`process_pdf`; ``error`` is a user-facing message."""

    fields: List[ExtractedField] = field(default_factory=list)
    source: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [extracted.to_dict() for extracted in self.fields]


class ExtractionSession:
    """State for a single extraction run. Create a new one per document."""

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        engine: Optional[RecognitionEngine] = None,
        classifier: Optional[LineClassifier] = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self._engine = engine
        self.classifier = classifier or LineClassifier()
        self.radios = RadioGroupAggregator()
        self.seen_keys: Set[str] = set()
        self.source = ""

    @property
    def engine(self) -> RecognitionEngine:
        if self._engine is None:
            self._engine = TesseractEngine(self.config.tesseract_cmd)
        return self._engine

    def extract_annotations(self, doc: PdfDocument) -> List[ExtractedField]:
        fields: List[ExtractedField] = []
        for page in doc.pages():
            widgets = page.widgets()
            if not widgets:
                continue
            rows = TextRows(page.text_items())
            page_fields = extract_page_fields(
                widgets,
                rows,
                self.radios,
                band=self.config.label_band,
                max_items=self.config.label_items,
            )
            logger.debug("Page %d: %d widgets, %d fields", page.index + 1, len(widgets), len(page_fields))
            fields.extend(page_fields)
        fields.extend(self.radios.finalize())
        return fields

    def extract_ocr(self, doc: PdfDocument) -> List[ExtractedField]:
        engine = self.engine
        engine.ensure_ready()
        fields: List[ExtractedField] = []
        for page in doc.pages():
            image = None
            try:
                image = page.render(self.config.ocr_scale)
                result = engine.recognize(image, self.config.ocr_language)
            except OcrError:
                raise
            except Exception as exc:
                raise OcrFailedError(page.index, str(exc)) from exc
            finally:
                if image is not None:
                    image.close()
            lines = result.to_lines()
            page_fields = self.classifier.classify(lines)
            logger.debug("Page %d: %d OCR lines, %d fields", page.index + 1, len(lines), len(page_fields))
            fields.extend(dedupe_fields(page_fields, self.seen_keys))
        return fields

    def run(self, source: PdfSource) -> List[ExtractedField]:
        with PdfDocument(source) as doc:
            fields = self.extract_annotations(doc)
            self.source = SOURCE_ANNOTATIONS
            if not fields:
                logger.info("No form widgets found; falling back to OCR")
                fields = self.extract_ocr(doc)
                self.source = SOURCE_OCR
        if not fields:
            raise NoFieldsDetectedError("no fields detected")
        return assign_unique_labels(fields)


def extract_fields(
    source: PdfSource,
    config: Optional[ExtractionConfig] = None,
    engine: Optional[RecognitionEngine] = None,
) -> List[ExtractedField]:
    """Extract fields from a PDF, raising on failure."""

    return ExtractionSession(config=config, engine=engine).run(source)


def process_pdf(
    source: PdfSource,
    config: Optional[ExtractionConfig] = None,
    engine: Optional[RecognitionEngine] = None,
) -> ExtractionResult:
    """Extract fields and convert every failure into a status message."""

    session = ExtractionSession(config=config, engine=engine)
    try:
        fields = session.run(source)
    except OcrError as exc:
        logger.error("OCR failed: %s", exc)
        return ExtractionResult(source=SOURCE_OCR, error=OCR_FAILED_MESSAGE)
    except NoFieldsDetectedError:
        logger.info("No fields detected (source=%s)", session.source or "n/a")
        return ExtractionResult(source=session.source, error=NO_FIELDS_MESSAGE)
    except Exception:
        logger.exception("PDF processing error")
        return ExtractionResult(source=session.source, error=PROCESSING_FAILED_MESSAGE)
    logger.info("Extracted %d field(s) from %s", len(fields), session.source)
    return ExtractionResult(fields=fields, source=session.source)


def _field_name(label: str) -> str:
    name = re.sub(r"\s+", "_", (label or "field").lower())
    return re.sub(r"[^a-zA-Z0-9_]", "", name)


def build_import_payload(fields: Iterable[ExtractedField]) -> List[Dict[str, Any]]:
    """Form-builder field definitions for every field still marked for import."""

    stamp = int(time.time() * 1000)
    payload: List[Dict[str, Any]] = []
    for index, extracted in enumerate(item for item in fields if item.selected):
        data = extracted.to_dict()
        entry: Dict[str, Any] = {
            "id": f"field_{stamp}_{index}_{uuid.uuid4().hex[:9]}",
            "name": _field_name(extracted.label),
            "label": extracted.label,
            "type": extracted.field_type.value,
            "placeholder": "",
            "required": extracted.required,
            "validation": {},
            "width": "full",
            "helpText": "",
            "defaultValue": "",
        }
        if extracted.field_type in CHOICE_TYPES:
            entry["options"] = data.get("options") or [option.to_dict() for option in DEFAULT_OPTION]
        if extracted.field_type == FieldType.HEADING:
            entry["level"] = 3
        if extracted.field_type == FieldType.CHECKBOX:
            entry["checkboxText"] = data.get("checkboxText") or extracted.label
        if extracted.field_type == FieldType.INLINE_TEXT:
            entry["parts"] = data.get("parts", [])
        payload.append(entry)
    return payload


__all__ = [
    "ExtractionResult",
    "ExtractionSession",
    "NO_FIELDS_MESSAGE",
    "OCR_FAILED_MESSAGE",
    "PROCESSING_FAILED_MESSAGE",
    "build_import_payload",
    "extract_fields",
    "process_pdf",
]
