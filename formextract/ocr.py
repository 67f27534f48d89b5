"""Optical recognition engines used by the scanned-document fallback."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image
from pytesseract import Output

from .errors import OcrUnavailableError

logger = logging.getLogger(__name__)

_LINE_BREAKS = re.compile(r"\n+")


@dataclass(frozen=True)
class RecognitionResult:
    """Either line-segmented text or a single blob of text."""

    lines: Optional[Tuple[str, ...]] = None
    text: str = ""

    def to_lines(self) -> List[str]:
        if self.lines is not None:
            return list(self.lines)
        return _LINE_BREAKS.split(self.text or "")


class RecognitionEngine(ABC):
    """Interface for an engine turning a page image into text."""

    def ensure_ready(self) -> None:
        """Raise :class:`OcrUnavailableError` when the engine cannot run."""

    @abstractmethod
    def recognize(self, image: Image.Image, language: str = "eng") -> RecognitionResult:
        """Recognise ``image`` in ``language``."""


class TesseractEngine(RecognitionEngine):
    """Tesseract through pytesseract, grouping word boxes into lines."""

    def __init__(self, tesseract_cmd: Optional[str] = None) -> None:
        self._tesseract_cmd = tesseract_cmd
        self._version: Optional[str] = None

    def ensure_ready(self) -> None:
        if self._version is not None:
            return
        if self._tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as exc:
            raise OcrUnavailableError(f"Tesseract is not available: {exc}") from exc
        self._version = str(version)
        logger.info("Tesseract OCR available: %s", self._version)

    def recognize(self, image: Image.Image, language: str = "eng") -> RecognitionResult:
        self.ensure_ready()
        data = pytesseract.image_to_data(image, lang=language, output_type=Output.DICT)
        lines = self._group_lines(data)
        if lines:
            return RecognitionResult(lines=tuple(lines))
        logger.debug("No word boxes recognised; falling back to plain text output")
        return RecognitionResult(text=pytesseract.image_to_string(image, lang=language))

    @staticmethod
    def _group_lines(data: Dict[str, list]) -> List[str]:
        words = data.get("text") or []
        grouped: Dict[Tuple[int, int, int], List[str]] = {}
        for index, word in enumerate(words):
            if not isinstance(word, str) or not word.strip():
                continue
            try:
                key = (
                    int(data["block_num"][index]),
                    int(data["par_num"][index]),
                    int(data["line_num"][index]),
                )
            except (KeyError, IndexError, TypeError, ValueError):
                continue
            grouped.setdefault(key, []).append(word.strip())
        return [" ".join(parts) for parts in grouped.values()]


__all__ = ["RecognitionEngine", "RecognitionResult", "TesseractEngine"]
