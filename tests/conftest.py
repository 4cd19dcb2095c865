"""Fixtures compartidos: viajes Divvy pequeños construidos a mano."""

import pandas as pd
import pytest


@pytest.fixture
def make_trips():
    """
    Construye un DataFrame con columnas end_* a partir de grupos
    (station_id, station_name, lat, lng, veces).
    """

    def _make(*groups):
        rows = []
        for station_id, name, lat, lng, times in groups:
            rows.extend(
                [
                    {
                        "end_station_id": station_id,
                        "end_station_name": name,
                        "end_lat": lat,
                        "end_lng": lng,
                    }
                ]
                * times
            )
        df = pd.DataFrame(
            rows, columns=["end_station_id", "end_station_name", "end_lat", "end_lng"]
        )
        df["end_lat"] = df["end_lat"].astype("float64")
        df["end_lng"] = df["end_lng"].astype("float64")
        return df

    return _make


@pytest.fixture
def trips_df() -> pd.DataFrame:
    """Seis viajes completos (esquema Divvy), uno con duración negativa."""
    return pd.DataFrame(
        {
            "ride_id": ["r1", "r2", "r3", "r4", "r5", "r6"],
            "rideable_type": [
                "classic_bike",
                "electric_bike",
                "classic_bike",
                "classic_bike",
                "electric_bike",
                "classic_bike",
            ],
            "started_at": [
                "2023-06-05 08:00:00",  # lunes
                "2023-06-05 08:30:00",
                "2023-06-10 14:00:00",  # sábado
                "2023-06-11 15:00:00",  # domingo
                "2023-07-03 17:00:00",  # lunes
                "2023-07-03 18:00:00",
            ],
            "ended_at": [
                "2023-06-05 08:10:00",  # 10 min
                "2023-06-05 08:50:00",  # 20 min
                "2023-06-10 14:30:00",  # 30 min
                "2023-06-11 16:00:00",  # 60 min
                "2023-07-03 17:05:00",  # 5 min
                "2023-07-03 17:55:00",  # -5 min
            ],
            "start_station_id": ["S1", "S1", "S2", "S2", None, "S1"],
            "start_station_name": ["Clark St", "Clark St", "Lake Shore", "Lake Shore", None, "Clark St"],
            "start_lat": [41.90, 41.90, 41.88, 41.88, 41.95, 41.90],
            "start_lng": [-87.63, -87.63, -87.61, -87.61, -87.65, -87.63],
            "end_station_id": ["S2", "S2", "S1", "S2", "S3", None],
            "end_station_name": ["Lake Shore", "Lake Shore", "Clark St", "Lake Shore", "Wells St", None],
            "end_lat": [41.88, 41.88, 41.90, 41.8801, 41.91, 41.92],
            "end_lng": [-87.61, -87.61, -87.63, -87.6101, -87.64, -87.66],
            "member_casual": ["member", "member", "casual", "casual", "casual", "member"],
        }
    )
