"""
build_station_map_table.py
==========================

Tabla lista para un mapa de estaciones:
    station_id, station_name, lat, lng, rides

- rides = nº de viajes que terminan (o empiezan) en la estación
- lat/lng = coordenada canónica (ver build_station_coords.py)
- Opcional: solo un tipo de usuario (casual / member) y top N estaciones

ENTRADA:
- data/silver/divvy_trips_clean.parquet
- data/gold/station_coords.parquet (si no existe, se calcula al vuelo)

SALIDA:
- reports/tables/station_map_<rider>.csv
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from cyclistic import config
from cyclistic.gold.build_station_coords import STATION_COLUMNS, resolve_canonical_stations
from cyclistic.transform.clean_trips import check_columns


def count_trips_by_station(
    df: pd.DataFrame, prefix: str = "end", rider: Optional[str] = None
) -> pd.DataFrame:
    """station_id, rides (filas sin station_id no cuentan)."""
    id_col = config.station_columns(prefix)["station_id"]
    check_columns(df, [id_col] + ([config.RIDER_COL] if rider else []))

    if rider is not None:
        df = df[df[config.RIDER_COL] == rider]

    ids = df[id_col].dropna()
    counts = ids.value_counts().rename_axis("station_id").reset_index(name="rides")
    return counts


def build_station_map_table(
    df: pd.DataFrame,
    canonical: pd.DataFrame,
    prefix: str = "end",
    rider: Optional[str] = None,
    top_n: Optional[int] = None,
) -> pd.DataFrame:
    """
    JOIN de viajes por estación con las coordenadas canónicas.
    Estaciones sin coordenada (no están en `canonical`) se descartan.
    """
    counts = count_trips_by_station(df, prefix=prefix, rider=rider)
    out = counts.merge(canonical[STATION_COLUMNS], on="station_id", how="inner")
    out = out.dropna(subset=["lat", "lng"])

    out = out.sort_values(["rides", "station_id"], ascending=[False, True])
    if top_n is not None:
        out = out.head(top_n)

    return out[STATION_COLUMNS + ["rides"]].reset_index(drop=True)


def main(rider: Optional[str] = "casual", prefix: str = "end", top_n: Optional[int] = 100) -> None:
    inp = config.CLEAN_TRIPS
    if not inp.exists():
        raise FileNotFoundError(f"No existe: {inp}")

    if rider is not None and rider not in config.RIDER_TYPES:
        raise ValueError(f"rider tiene que ser uno de {config.RIDER_TYPES}, no {rider!r}")

    df = pd.read_parquet(inp)
    print(f"📥 IN : {inp} | filas={len(df):,}")

    if config.STATION_COORDS.exists():
        canonical = pd.read_parquet(config.STATION_COORDS)
        print(f"📍 Coordenadas: {config.STATION_COORDS}")
    else:
        print("⚠️ No hay station_coords.parquet, lo calculo al vuelo")
        canonical = resolve_canonical_stations(df, prefix)

    table = build_station_map_table(df, canonical, prefix=prefix, rider=rider, top_n=top_n)

    config.TABLES_DIR.mkdir(parents=True, exist_ok=True)
    out = config.TABLES_DIR / f"station_map_{rider or 'all'}.csv"
    table.to_csv(out, index=False)

    print(f"✅ {out} | estaciones={len(table):,}")
    print(table.head(10).to_string(index=False))


if __name__ == "__main__":
    main()
