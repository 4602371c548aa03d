from __future__ import annotations

from typing import Optional

from pydantic import Field

from navtrack.models.base import ActivityType, CamelModel


class ActivityShare(CamelModel):
    """Total time spent in one activity (e.g. docked at Ceuta)."""
    id: str
    name: str
    type: ActivityType
    port: Optional[str] = None
    seconds: int = Field(ge=0)
    count: int = Field(ge=0)
