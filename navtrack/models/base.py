"""Shared enums and the base model for all domain types."""
from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Domain models serialize with camelCase keys for the rendering layer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NavStatus(str, enum.Enum):
    DOCKED = "0.0"
    MANEUVERING = "1.0"
    NAVIGATING = "2.0"

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional["NavStatus"]:
        """Map a raw status code to a named variant, None for unknown codes."""
        for member in cls:
            if member.value == code:
                return member
        return None

    @property
    def label(self) -> str:
        return _NAV_STATUS_LABELS[self]


_NAV_STATUS_LABELS = {
    NavStatus.DOCKED: "Docked",
    NavStatus.MANEUVERING: "Maneuvering",
    NavStatus.NAVIGATING: "Navigating",
}

# Statuses that count as "under way" when bounding a route
UNDERWAY_STATUSES = frozenset({NavStatus.MANEUVERING, NavStatus.NAVIGATING})


def nav_status_label(code: str) -> str:
    """Display name for a raw status code; unknown codes are shown verbatim."""
    status = NavStatus.from_code(code)
    return status.label if status else f"Status {code}"


class EndReason(str, enum.Enum):
    STATUS_CHANGE = "status_change"
    TIME_GAP = "time_gap"
    END_OF_DATA = "end_of_data"


class ActivityType(str, enum.Enum):
    DOCKED = "docked"
    MANEUVERING = "maneuvering"
    TRANSIT = "transit"
    UNDEFINED = "undefined"
