"""Row index over a page's text layer and proximity label lookup."""

from __future__ import annotations

import math
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import Rect, TextItem

_TRAILING_LABEL_NOISE = re.compile(r"[:*\-\s]+$")


def _bucket(value: float) -> int:
    return int(math.floor(value + 0.5))


class TextRows(Mapping[int, Tuple[TextItem, ...]]):
    """Text items bucketed by rounded baseline, sorted left to right."""

    def __init__(self, items: Iterable[TextItem] = ()) -> None:
        grouped: Dict[int, List[TextItem]] = defaultdict(list)
        for item in items:
            grouped[_bucket(item.y)].append(item)
        self._rows: Dict[int, Tuple[TextItem, ...]] = {
            key: tuple(sorted(row, key=lambda item: item.x)) for key, row in grouped.items()
        }

    def __getitem__(self, key: int) -> Tuple[TextItem, ...]:
        return self._rows[key]

    def __iter__(self):
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)


def find_nearby_label(
    rows: Mapping[int, Sequence[TextItem]],
    rect: Optional[Sequence[float]],
    band: int = 6,
    max_items: int = 6,
) -> str:
    """Return the text closest to the left of ``rect`` within ``band`` units of its center.

    Rows are scanned top to bottom; ties on horizontal distance keep the
    first row seen. An empty string means nothing qualified.
    """

    if not rect or len(rect) < 4:
        return ""
    x0, y0, x1, y1 = (float(value) for value in rect[:4])
    min_x = min(x0, x1)
    center = _bucket((min(y0, y1) + max(y0, y1)) / 2.0)

    candidates: List[Tuple[float, str]] = []
    for offset in range(-band, band + 1):
        row = rows.get(center + offset)
        if not row:
            continue
        left_items = [item for item in row if item.x < min_x]
        if not left_items:
            continue
        near = left_items[-max_items:]
        label = " ".join(item.text for item in near).strip()
        if label:
            candidates.append((min_x - near[-1].x, label))
    if not candidates:
        return ""
    candidates.sort(key=lambda candidate: candidate[0])
    return _TRAILING_LABEL_NOISE.sub("", candidates[0][1]).strip()


__all__ = ["TextRows", "find_nearby_label"]
