"""
build_station_coords_duckdb.py
------------------------------
Lo mismo que build_station_coords.py, pero en DuckDB.

¿Por qué?
- Un año de Divvy son ~5-6M viajes. Con pandas va, pero justito de RAM
  si el parquet trae todas las columnas.
- DuckDB lee el parquet directamente y hace el GROUP BY sin cargarlo entero.

Regla (idéntica a la versión pandas):
- GROUP BY station_id, station_name, lat, lng -> n
- ROW_NUMBER() por station_id ordenando:
    n DESC, station_name ASC, lat ASC, lng ASC (nulos al final)
- Nos quedamos con rk = 1

Salida:
- data/gold/station_coords.parquet

Uso:
  Desde la raíz del repo:
    python -m cyclistic.gold.build_station_coords_duckdb
"""

from __future__ import annotations

from pathlib import Path

import duckdb
import pandas as pd

from cyclistic import config
from cyclistic.gold.build_station_coords import pick_input_file


def parquet_source(path: Path) -> str:
    """read_parquet('...') con la ruta en formato posix (Windows friendly)."""
    return f"read_parquet('{path.as_posix()}')"


def build_resolver_sql(source: str, prefix: str = "end") -> str:
    """
    SQL que devuelve 1 fila por station_id con la variante más frecuente.

    source: cualquier cosa que valga en un FROM (tabla, vista, read_parquet(...)).
    """
    cols = config.station_columns(prefix)
    return f"""
    WITH obs AS (
        SELECT
            {cols['station_id']}   AS station_id,
            CAST({cols['station_name']} AS VARCHAR) AS station_name,
            CAST({cols['lat']} AS DOUBLE) AS lat,
            CAST({cols['lng']} AS DOUBLE) AS lng
        FROM {source}
        WHERE {cols['station_id']} IS NOT NULL
    ),
    variants AS (
        SELECT station_id, station_name, lat, lng, COUNT(*) AS n
        FROM obs
        GROUP BY station_id, station_name, lat, lng
    ),
    ranked AS (
        SELECT
            *,
            ROW_NUMBER() OVER (
                PARTITION BY station_id
                ORDER BY n DESC,
                         station_name ASC NULLS LAST,
                         lat ASC NULLS LAST,
                         lng ASC NULLS LAST
            ) AS rk
        FROM variants
    )
    SELECT station_id, station_name, lat, lng
    FROM ranked
    WHERE rk = 1
    ORDER BY station_id
    """


def resolve_canonical_stations_duckdb(
    con: duckdb.DuckDBPyConnection, source: str, prefix: str = "end"
) -> pd.DataFrame:
    """Ejecuta el resolver sobre `source` y devuelve un DataFrame."""
    return con.execute(build_resolver_sql(source, prefix)).df()


def resolve_frame_duckdb(trips: pd.DataFrame, prefix: str = "end") -> pd.DataFrame:
    """Atajo para DataFrames ya cargados (los registra como vista temporal)."""
    con = duckdb.connect(database=":memory:")
    try:
        con.register("trips", trips)
        return resolve_canonical_stations_duckdb(con, "trips", prefix)
    finally:
        con.close()


def build_copy_sql(source: str, out: Path, prefix: str = "end") -> str:
    """
    COPY del resolver a parquet con los mismos tipos que STATION_SCHEMA
    (station_id/station_name VARCHAR, lat/lng DOUBLE).
    """
    return f"""
    COPY (
        SELECT
            CAST(station_id AS VARCHAR)   AS station_id,
            CAST(station_name AS VARCHAR) AS station_name,
            CAST(lat AS DOUBLE)           AS lat,
            CAST(lng AS DOUBLE)           AS lng
        FROM (
            {build_resolver_sql(source, prefix)}
        )
        ORDER BY station_id
    )
    TO '{out.as_posix()}'
    (FORMAT PARQUET);
    """


def main(prefix: str = "end") -> None:
    inp = pick_input_file([config.CLEAN_TRIPS, config.SILVER_TRIPS])
    out = config.STATION_COORDS

    print(f"📁 ROOT: {config.ROOT}")
    print(f"📥 IN : {inp}")
    print(f"📤 OUT: {out}")

    out.parent.mkdir(parents=True, exist_ok=True)

    con = duckdb.connect(database=":memory:")
    try:
        con.execute(f"PRAGMA threads={config.DUCKDB_THREADS};")

        src = parquet_source(inp)
        in_rows = con.execute(f"SELECT COUNT(*) FROM {src}").fetchone()[0]
        print(f"🔢 Filas input: {in_rows:,}")

        print("🧠 Resolviendo coordenadas canónicas (GROUP BY + ROW_NUMBER)...")
        con.execute(build_copy_sql(src, out, prefix))

        out_rows = con.execute(f"SELECT COUNT(*) FROM {parquet_source(out)}").fetchone()[0]
    finally:
        con.close()

    print("\n==============================")
    print(f"✅ OK -> {out}")
    print(f"Estaciones: {out_rows:,}")
    print("==============================\n")


if __name__ == "__main__":
    main()
