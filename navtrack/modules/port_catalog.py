"""Port catalog and nearest-port lookup.

The catalog is a plain ordered list of reference points. Lookups scan it
linearly; on equal distances the port listed first wins. Distance ceilings
are applied by callers, never here.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Sequence

import yaml
from pydantic import BaseModel, ValidationError

from navtrack.models.port import Port, PortAnalysis
from navtrack.utils.geo import haversine_km, is_valid_coordinate, round_km

logger = logging.getLogger(__name__)

# (name, lat, lon) for the Strait of Gibraltar deployment
DEFAULT_PORTS: list[tuple[str, float, float]] = [
    ("Algeciras", 36.128740148, -5.439981128),
    ("Tanger Med", 35.880312709, -5.515627045),
    ("Ceuta", 35.889, -5.307),
]


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance rounded to 2 decimals for output."""
    return round_km(haversine_km(lat1, lon1, lat2, lon2))


class PortCatalog:
    """Immutable, ordered collection of ports."""

    def __init__(self, ports: Iterable[Port]):
        self._ports: tuple[Port, ...] = tuple(ports)
        if not self._ports:
            raise ValueError("Port catalog must contain at least one port")

    @classmethod
    def default(cls) -> "PortCatalog":
        return cls(Port(name=name, lat=lat, lon=lon) for name, lat, lon in DEFAULT_PORTS)

    @property
    def ports(self) -> Sequence[Port]:
        return self._ports

    def __len__(self) -> int:
        return len(self._ports)

    def __iter__(self):
        return iter(self._ports)

    def nearest_port(self, lat: Optional[float], lon: Optional[float]) -> Optional[PortAnalysis]:
        """Closest port to (lat, lon), or None when the position is unknown."""
        if not is_valid_coordinate(lat, lon):
            return None
        best: Optional[Port] = None
        best_dist = math.inf
        for port in self._ports:
            dist = haversine_km(lat, lon, port.lat, port.lon)
            if dist < best_dist:
                best, best_dist = port, dist
        return PortAnalysis(name=best.name, distance=round_km(best_dist))

    def nearest_port_within(
        self, lat: Optional[float], lon: Optional[float], max_km: float,
    ) -> Optional[PortAnalysis]:
        """Nearest port only if it lies within max_km."""
        result = self.nearest_port(lat, lon)
        if result is None or result.distance > max_km:
            return None
        return result

    def all_distances(self, lat: Optional[float], lon: Optional[float]) -> list[PortAnalysis]:
        """Every port with its distance, closest first (stable on ties)."""
        if not is_valid_coordinate(lat, lon):
            return []
        results = [
            PortAnalysis(name=port.name, distance=distance_km(lat, lon, port.lat, port.lon))
            for port in self._ports
        ]
        return sorted(results, key=lambda r: r.distance)


class _PortsFile(BaseModel):
    ports: list[Port]


def load_port_catalog(path: str | Path | None = None) -> PortCatalog:
    """Load the catalog from YAML, falling back to the built-in ports.

    Expected layout::

        ports:
          - {name: Algeciras, lat: 36.1287, lon: -5.4400}
    """
    if path is None:
        from navtrack.config import settings
        path = settings.PORTS_CONFIG

    config_path = Path(path)
    if not config_path.exists():
        logger.warning("Port catalog %s not found, using built-in catalog", config_path)
        return PortCatalog.default()

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    try:
        parsed = _PortsFile.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid port catalog {config_path}: {exc}") from exc

    logger.info("Loaded %d ports from %s", len(parsed.ports), config_path)
    return PortCatalog(parsed.ports)
