"""Collapse same-named radio button widgets into single radio fields."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .models import ExtractedField, FieldOption, FieldType, RadioGroup, WidgetAnnotation, make_field
from .utils import to_title

logger = logging.getLogger(__name__)

DEFAULT_GROUP_NAME = "RadioGroup"
DEFAULT_EXPORT_VALUE = "on"


class RadioGroupAggregator:
    """Accumulates radio options per field name across every page of one run."""

    def __init__(self) -> None:
        self._groups: Dict[str, RadioGroup] = {}

    def __len__(self) -> int:
        return len(self._groups)

    def add(self, annotation: WidgetAnnotation, nearby_label: Optional[str] = None) -> None:
        group_name = annotation.name or DEFAULT_GROUP_NAME
        export_value = str(annotation.export_value or DEFAULT_EXPORT_VALUE)
        option = FieldOption(value=export_value, label=nearby_label or to_title(export_value))

        group = self._groups.get(group_name)
        if group is None:
            group = RadioGroup(label=to_title(group_name))
            self._groups[group_name] = group
        if not group.add(option):
            logger.debug("Radio group %r already has option %r", group_name, export_value)

    def finalize(self) -> List[ExtractedField]:
        """One ``radio`` field per group, in first-seen order."""

        return [
            make_field(
                FieldType.RADIO,
                group.label or to_title(name),
                options=tuple(group.options),
                pdf_type="radio",
                required=False,
            )
            for name, group in self._groups.items()
        ]


__all__ = ["RadioGroupAggregator"]
