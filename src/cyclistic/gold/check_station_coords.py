"""
Comprobaciones rápidas de station_coords.parquet contra los viajes:
- nº de station_id distintos (no nulos) en viajes vs filas en coords
- ids duplicados en coords (tiene que ser 0)
- cuántas estaciones tenían más de una variante de coordenadas
"""

from __future__ import annotations

import duckdb

from cyclistic import config
from cyclistic.gold.build_station_coords_duckdb import parquet_source


def station_coord_report(
    con: duckdb.DuckDBPyConnection, trips: str, coords: str, prefix: str = "end"
) -> dict:
    """trips / coords: cualquier cosa que valga en un FROM."""
    cols = config.station_columns(prefix)
    sid = cols["station_id"]

    trip_ids = con.execute(
        f"SELECT COUNT(DISTINCT {sid}) FROM {trips} WHERE {sid} IS NOT NULL"
    ).fetchone()[0]
    null_rows = con.execute(
        f"SELECT COUNT(*) FROM {trips} WHERE {sid} IS NULL"
    ).fetchone()[0]

    coord_rows = con.execute(f"SELECT COUNT(*) FROM {coords}").fetchone()[0]
    dup_ids = con.execute(
        f"""
        SELECT COUNT(*) FROM (
            SELECT station_id, COUNT(*) AS c
            FROM {coords}
            GROUP BY station_id
            HAVING c > 1
        )
        """
    ).fetchone()[0]

    # ids del output que no están en los viajes (no debería pasar nunca)
    unknown_ids = con.execute(
        f"""
        SELECT COUNT(*) FROM {coords} c
        WHERE c.station_id NOT IN (
            SELECT {sid} FROM {trips} WHERE {sid} IS NOT NULL
        )
        """
    ).fetchone()[0]

    multi_variant = con.execute(
        f"""
        SELECT COUNT(*) FROM (
            SELECT {sid}
            FROM (
                SELECT DISTINCT {sid}, {cols['station_name']}, {cols['lat']}, {cols['lng']}
                FROM {trips}
                WHERE {sid} IS NOT NULL
            )
            GROUP BY {sid}
            HAVING COUNT(*) > 1
        )
        """
    ).fetchone()[0]

    return {
        "trip_station_ids": int(trip_ids),
        "trip_rows_without_id": int(null_rows),
        "coord_rows": int(coord_rows),
        "dup_ids": int(dup_ids),
        "unknown_ids": int(unknown_ids),
        "multi_variant_ids": int(multi_variant),
    }


def main(prefix: str = "end") -> None:
    trips = config.CLEAN_TRIPS if config.CLEAN_TRIPS.exists() else config.SILVER_TRIPS
    coords = config.STATION_COORDS

    for p in (trips, coords):
        if not p.exists():
            raise FileNotFoundError(f"No existe: {p}")

    con = duckdb.connect()
    report = station_coord_report(con, parquet_source(trips), parquet_source(coords), prefix)
    con.close()

    print("\n== station_coords ==")
    for k, v in report.items():
        print(f"{k:>22}: {v:,}")

    if report["dup_ids"] == 0 and report["coord_rows"] == report["trip_station_ids"]:
        print("\n🎉 Perfecto: 1 fila por station_id.")
    else:
        print("\n⚠️  station_coords no cuadra con los viajes. Regenera con build_station_coords.py")


if __name__ == "__main__":
    main()
