from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterable, Optional

import pandas as pd


@dataclass(frozen=True)
class TripObservation:
    """Lado final de un viaje: estación (puede faltar) y coordenadas observadas."""

    end_station_id: Optional[str]
    end_station_name: Optional[str]
    end_lat: Optional[float]
    end_lng: Optional[float]


OBSERVATION_COLUMNS = [f.name for f in fields(TripObservation)]


def observations_to_frame(observations: Iterable[TripObservation]) -> pd.DataFrame:
    """Lista de TripObservation -> DataFrame con las columnas end_*."""
    rows = [
        (o.end_station_id, o.end_station_name, o.end_lat, o.end_lng)
        for o in observations
    ]
    df = pd.DataFrame(rows, columns=OBSERVATION_COLUMNS)
    df["end_lat"] = pd.to_numeric(df["end_lat"], errors="coerce").astype("float64")
    df["end_lng"] = pd.to_numeric(df["end_lng"], errors="coerce").astype("float64")
    return df
