"""PyMuPDF adapter exposing pages, widgets, text runs and rasters."""

from __future__ import annotations

import logging
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

import fitz
from PIL import Image

from .models import TextItem, WidgetAnnotation, WidgetKind

logger = logging.getLogger(__name__)

PdfSource = Union[str, bytes, bytearray, BinaryIO]

# Field flag bits (PDF 1.7, table 221 onwards); bit n is 1 << (n - 1).
FLAG_REQUIRED = 1 << 1
FLAG_MULTILINE = 1 << 12
FLAG_RADIO = 1 << 15
FLAG_PUSHBUTTON = 1 << 16
FLAG_COMBO = 1 << 17
FLAG_MULTI_SELECT = 1 << 21

_WIDGET_KIND_MAP_INT: Dict[int, WidgetKind] = {}
_WIDGET_INT_PAIRS = {
    "PDF_WIDGET_TYPE_TEXT": WidgetKind.TEXT,
    "PDF_WIDGET_TYPE_CHECKBOX": WidgetKind.BUTTON,
    "PDF_WIDGET_TYPE_RADIOBUTTON": WidgetKind.BUTTON,
    "PDF_WIDGET_TYPE_BUTTON": WidgetKind.BUTTON,
    "PDF_WIDGET_TYPE_COMBOBOX": WidgetKind.CHOICE,
    "PDF_WIDGET_TYPE_LISTBOX": WidgetKind.CHOICE,
    "PDF_WIDGET_TYPE_SIGNATURE": WidgetKind.SIGNATURE,
}
for attr_name, widget_kind in _WIDGET_INT_PAIRS.items():
    value = getattr(fitz, attr_name, None)
    if isinstance(value, int):
        _WIDGET_KIND_MAP_INT[value] = widget_kind

_WIDGET_KIND_MAP_STR = {
    "text": WidgetKind.TEXT,
    "tx": WidgetKind.TEXT,
    "combobox": WidgetKind.CHOICE,
    "listbox": WidgetKind.CHOICE,
    "ch": WidgetKind.CHOICE,
    "checkbox": WidgetKind.BUTTON,
    "radiobutton": WidgetKind.BUTTON,
    "button": WidgetKind.BUTTON,
    "btn": WidgetKind.BUTTON,
    "signature": WidgetKind.SIGNATURE,
    "sig": WidgetKind.SIGNATURE,
}


def _map_widget_kind(widget: fitz.Widget) -> Optional[WidgetKind]:
    widget_type = getattr(widget, "field_type", None)
    if isinstance(widget_type, int) and widget_type in _WIDGET_KIND_MAP_INT:
        return _WIDGET_KIND_MAP_INT[widget_type]
    type_string = getattr(widget, "field_type_string", None)
    if isinstance(type_string, str):
        return _WIDGET_KIND_MAP_STR.get(type_string.strip().lower())
    return None


def _button_flags(widget: fitz.Widget, flags: int) -> Tuple[bool, bool]:
    """Return ``(is_radio, is_checkbox)`` for a button widget."""

    widget_type = getattr(widget, "field_type", None)
    if widget_type == getattr(fitz, "PDF_WIDGET_TYPE_RADIOBUTTON", None) or flags & FLAG_RADIO:
        return True, False
    if widget_type == getattr(fitz, "PDF_WIDGET_TYPE_CHECKBOX", None):
        return False, True
    if flags & FLAG_PUSHBUTTON:
        return False, False
    return False, True


def _export_value(widget: fitz.Widget) -> Optional[str]:
    on_state = getattr(widget, "on_state", None)
    if callable(on_state):
        try:
            state = on_state()
        except (RuntimeError, ValueError, KeyError):
            state = None
        if isinstance(state, str) and state.strip() and state.strip().lower() != "off":
            return state.strip()
    for candidate in (getattr(widget, "field_value", None), getattr(widget, "field_default", None)):
        if isinstance(candidate, str):
            stripped = candidate.strip()
            if stripped and stripped.lower() not in {"off", "false"}:
                return stripped
    return None


def read_widget(widget: fitz.Widget) -> Optional[WidgetAnnotation]:
    """Convert a PyMuPDF widget, or return None for an unknown kind."""

    kind = _map_widget_kind(widget)
    if kind is None:
        return None
    rect = widget.rect
    flags = getattr(widget, "field_flags", 0)
    flags = flags if isinstance(flags, int) else 0
    name = getattr(widget, "field_name", None)
    is_radio, is_checkbox = _button_flags(widget, flags) if kind == WidgetKind.BUTTON else (False, False)
    options = getattr(widget, "choice_values", None) if kind == WidgetKind.CHOICE else None
    return WidgetAnnotation(
        kind=kind,
        rect=(float(rect.x0), float(rect.y0), float(rect.x1), float(rect.y1)),
        name=name.strip() if isinstance(name, str) else "",
        required=bool(flags & FLAG_REQUIRED),
        flags=flags,
        multiline=bool(flags & FLAG_MULTILINE),
        multi_select=bool(flags & FLAG_MULTI_SELECT),
        combo=bool(flags & FLAG_COMBO) or getattr(widget, "field_type", None) == getattr(fitz, "PDF_WIDGET_TYPE_COMBOBOX", None),
        is_radio=is_radio,
        is_checkbox=is_checkbox,
        export_value=_export_value(widget) if kind == WidgetKind.BUTTON else None,
        options=tuple(options) if isinstance(options, (list, tuple)) else (),
    )


class PdfPage:
    """One page of a :class:`PdfDocument`."""

    def __init__(self, page: fitz.Page, index: int) -> None:
        self._page = page
        self.index = index

    def widgets(self) -> List[WidgetAnnotation]:
        annotations: List[WidgetAnnotation] = []
        for widget in self._page.widgets() or ():
            try:
                annotation = read_widget(widget)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable widget on page %d: %s", self.index + 1, exc)
                continue
            if annotation is not None:
                annotations.append(annotation)
        return annotations

    def text_items(self) -> List[TextItem]:
        raw_dict = self._page.get_text("dict")
        if not isinstance(raw_dict, dict):
            return []
        items: List[TextItem] = []
        for block in raw_dict.get("blocks", []):
            if not isinstance(block, dict) or block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                if not isinstance(line, dict):
                    continue
                for span in line.get("spans", []):
                    if not isinstance(span, dict):
                        continue
                    text = span.get("text", "")
                    origin = span.get("origin")
                    if not isinstance(text, str) or not text.strip() or not origin:
                        continue
                    try:
                        items.append(TextItem(x=float(origin[0]), y=float(origin[1]), text=text))
                    except (TypeError, ValueError, IndexError):
                        continue
        return items

    def render(self, scale: float = 2.0) -> Image.Image:
        """Rasterize the page to an RGB image at ``scale`` times its size."""

        pixmap = self._page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)


class PdfDocument:
    """Context-managed wrapper around a ``fitz.Document``."""

    def __init__(self, source: PdfSource) -> None:
        if isinstance(source, str):
            self._doc = fitz.open(source)
        else:
            data = source if isinstance(source, (bytes, bytearray)) else source.read()
            self._doc = fitz.open(stream=bytes(data), filetype="pdf")
        logger.debug("Opened PDF with %d pages", self._doc.page_count)

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def pages(self) -> Iterator[PdfPage]:
        for index in range(self._doc.page_count):
            yield PdfPage(self._doc[index], index)

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["PdfDocument", "PdfPage", "PdfSource", "read_widget"]
