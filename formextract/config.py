"""Configuration for the extraction engine, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass(frozen=True)
class ExtractionConfig:
    """Tunable knobs for label matching and the optical fallback."""

    ocr_scale: float = 2.0
    ocr_language: str = "eng"
    label_band: int = 6
    label_items: int = 6
    tesseract_cmd: Optional[str] = None

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "ExtractionConfig":
        if load_dotenv_file:
            load_dotenv()
        scale = _env_float("FORMEXTRACT_OCR_SCALE", cls.ocr_scale)
        if scale <= 0:
            logger.warning("FORMEXTRACT_OCR_SCALE must be positive; using %s", cls.ocr_scale)
            scale = cls.ocr_scale
        return cls(
            ocr_scale=scale,
            ocr_language=os.getenv("FORMEXTRACT_OCR_LANG", cls.ocr_language).strip() or cls.ocr_language,
            label_band=max(0, _env_int("FORMEXTRACT_LABEL_BAND", cls.label_band)),
            label_items=max(1, _env_int("FORMEXTRACT_LABEL_ITEMS", cls.label_items)),
            tesseract_cmd=os.getenv("FORMEXTRACT_TESSERACT_CMD") or None,
        )


__all__ = ["ExtractionConfig"]
