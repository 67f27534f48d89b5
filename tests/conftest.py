"""Shared fixtures for formextract tests."""

from typing import List, Optional, Sequence

import fitz
import pytest

from formextract.errors import OcrUnavailableError
from formextract.ocr import RecognitionEngine, RecognitionResult


class FakeEngine(RecognitionEngine):
    """Recognition engine returning canned lines per page."""

    def __init__(
        self,
        pages: Sequence[Sequence[str]] = (),
        available: bool = True,
        fail_on_page: Optional[int] = None,
        blob: bool = False,
    ):
        self.pages = [list(lines) for lines in pages]
        self.available = available
        self.fail_on_page = fail_on_page
        self.blob = blob
        self.calls: List[tuple] = []

    def ensure_ready(self) -> None:
        if not self.available:
            raise OcrUnavailableError("engine failed to load")

    def recognize(self, image, language="eng"):
        page_index = len(self.calls)
        self.calls.append((image.size, language))
        if self.fail_on_page is not None and page_index == self.fail_on_page:
            raise RuntimeError("recognition crashed")
        lines = self.pages[page_index] if page_index < len(self.pages) else []
        if self.blob:
            return RecognitionResult(text="\n".join(lines))
        return RecognitionResult(lines=tuple(lines))


def build_pdf(page_texts: Sequence[Sequence[tuple]] = ((),), widgets: Sequence[dict] = ()) -> bytes:
    """Build a PDF in memory.

    ``page_texts`` holds one sequence of ``(x, y, text)`` per page; ``widgets``
    are widgets added to the first page as ``{"name", "rect", "type", "flags",
    "choice_values"}``; ``type`` defaults to a text widget.
    """

    doc = fitz.open()
    for texts in page_texts:
        page = doc.new_page()
        for x, y, text in texts:
            page.insert_text((x, y), text, fontsize=11)
    for entry in widgets:
        widget = fitz.Widget()
        widget.field_type = entry.get("type", fitz.PDF_WIDGET_TYPE_TEXT)
        widget.field_name = entry["name"]
        widget.rect = fitz.Rect(*entry["rect"])
        if entry.get("flags"):
            widget.field_flags = entry["flags"]
        if entry.get("choice_values"):
            widget.choice_values = list(entry["choice_values"])
        doc[0].add_widget(widget)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def fake_engine_factory():
    return FakeEngine


@pytest.fixture
def pdf_factory():
    return build_pdf
