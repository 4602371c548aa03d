from __future__ import annotations

from pydantic import Field

from navtrack.models.base import CamelModel


class Journey(CamelModel):
    index: int = Field(ge=0)
    start_port: str
    interval_count: int = Field(ge=1)
