"""
build_trip_summaries.py
=======================

Tablas resumen para comparar socios (member) y ocasionales (casual):

- por tipo de usuario: viajes, % del total, media/mediana/max/min de duración
- por tipo de usuario + dayofweek / month / hour / rideable_type:
    viajes y mediana de duración

ENTRADA:
- data/silver/divvy_trips_clean.parquet

SALIDA (reports/tables):
- trips_by_rider.csv
- trips_by_rider_dayofweek.csv
- trips_by_rider_month.csv
- trips_by_rider_hour.csv
- trips_by_rider_rideable_type.csv
"""

from __future__ import annotations

import pandas as pd

from cyclistic import config
from cyclistic.transform.clean_trips import check_columns


BREAKDOWNS = ["dayofweek", "month", "hour", config.RIDEABLE_COL]


def summarize_by_rider(df: pd.DataFrame) -> pd.DataFrame:
    check_columns(df, [config.RIDER_COL, "ride_length_min"])

    out = (
        df.groupby(config.RIDER_COL, observed=True)["ride_length_min"]
        .agg(
            rides="size",
            mean_ride_min="mean",
            median_ride_min="median",
            max_ride_min="max",
            min_ride_min="min",
        )
        .reset_index()
    )
    total = out["rides"].sum()
    out["share"] = out["rides"] / total if total else 0.0
    return out.sort_values(config.RIDER_COL).reset_index(drop=True)


def summarize_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Viajes y mediana de duración por (member_casual, column)."""
    check_columns(df, [config.RIDER_COL, column, "ride_length_min"])

    out = (
        df.groupby([config.RIDER_COL, column], observed=True)["ride_length_min"]
        .agg(rides="size", median_ride_min="median")
        .reset_index()
    )
    return out.sort_values([config.RIDER_COL, column]).reset_index(drop=True)


def build_all_summaries(df: pd.DataFrame) -> dict[str, pd.DataFrame]:
    """{nombre_fichero_sin_extension: tabla}"""
    tables = {"trips_by_rider": summarize_by_rider(df)}
    for col in BREAKDOWNS:
        if col not in df.columns:
            print(f"⚠️ Sin columna {col}, me salto ese resumen")
            continue
        tables[f"trips_by_rider_{col}"] = summarize_by(df, col)
    return tables


def main() -> None:
    inp = config.CLEAN_TRIPS
    if not inp.exists():
        raise FileNotFoundError(
            f"No existe: {inp}\n"
            "Ejecuta antes: python -m cyclistic.transform.clean_trips"
        )

    print(f"📥 IN : {inp}")
    df = pd.read_parquet(inp)
    print(f"🔢 Filas: {len(df):,}")

    config.TABLES_DIR.mkdir(parents=True, exist_ok=True)
    for name, table in build_all_summaries(df).items():
        p = config.TABLES_DIR / f"{name}.csv"
        table.to_csv(p, index=False)
        print(f"✅ {p} | filas={len(table):,}")

    print("\n== Resumen por tipo de usuario ==")
    print(summarize_by_rider(df).to_string(index=False))


if __name__ == "__main__":
    main()
