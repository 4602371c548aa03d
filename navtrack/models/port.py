"""Port reference points and nearest-port lookup results."""
from __future__ import annotations

from pydantic import Field

from navtrack.models.base import CamelModel


class Port(CamelModel):
    name: str
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    model_config = {"frozen": True}


class PortAnalysis(CamelModel):
    name: str
    distance: float = Field(ge=0)
