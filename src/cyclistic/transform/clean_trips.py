"""
clean_trips.py
==============

OBJETIVO:
- Partimos de la tabla de viajes ya cargada (data/silver/divvy_trips.parquet).
- Añadimos columnas de tiempo para poder agrupar:
    ride_length_min, hour, dayofweek (0=lunes), month, is_weekend
- Quitamos los viajes con duración <= 0 (o fechas rotas).
  En Divvy salen cuando la bici se saca del anclaje para mantenimiento.

SALIDA:
- data/silver/divvy_trips_clean.parquet

NOTAS:
- No etiquetamos días/meses con nombres: se quedan como enteros.
- Las fechas se usan tal cual vienen (sin convertir zona horaria).
"""

from __future__ import annotations

import pandas as pd

from cyclistic import config


REQUIRED_COLUMNS = [
    "ride_id",
    config.RIDEABLE_COL,
    config.STARTED_COL,
    config.ENDED_COL,
    config.RIDER_COL,
]


def check_columns(df: pd.DataFrame, required: list[str]) -> None:
    """KeyError con la lista de columnas que faltan (si falta alguna)."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise KeyError(f"Faltan columnas: {missing}. Columnas encontradas: {list(df.columns)[:30]}")


def add_ride_features(df: pd.DataFrame) -> pd.DataFrame:
    """
    Crea columnas de duración y tiempo. Devuelve una copia.
    """
    check_columns(df, [config.STARTED_COL, config.ENDED_COL])
    df = df.copy()

    started = pd.to_datetime(df[config.STARTED_COL], errors="coerce")
    ended = pd.to_datetime(df[config.ENDED_COL], errors="coerce")
    df[config.STARTED_COL] = started
    df[config.ENDED_COL] = ended

    df["ride_length_min"] = (ended - started).dt.total_seconds() / 60
    df["hour"] = started.dt.hour
    df["dayofweek"] = started.dt.dayofweek  # 0=lunes
    df["month"] = started.dt.month
    df["is_weekend"] = (df["dayofweek"] >= 5).astype("int8")
    return df


def filter_valid_rides(df: pd.DataFrame, min_minutes: float = 0) -> tuple[pd.DataFrame, int]:
    """
    Se queda con los viajes con ride_length_min > min_minutes.
    Fechas que no se pueden parsear -> ride_length_min NaN -> fuera.

    Devuelve (df_limpio, filas_eliminadas)
    """
    if "ride_length_min" not in df.columns:
        df = add_ride_features(df)

    keep = df["ride_length_min"] > min_minutes
    clean = df[keep].reset_index(drop=True)
    return clean, int(len(df) - len(clean))


def main(min_minutes: float = 0) -> None:
    inp = config.SILVER_TRIPS
    out = config.CLEAN_TRIPS

    print(f"📁 ROOT: {config.ROOT}")
    print(f"📥 IN : {inp}")
    print(f"📤 OUT: {out}")

    if not inp.exists():
        raise FileNotFoundError(f"No existe: {inp}")

    df = pd.read_parquet(inp)
    check_columns(df, REQUIRED_COLUMNS)
    print(f"🔢 Filas input: {len(df):,}")

    df = add_ride_features(df)
    clean, removed = filter_valid_rides(df, min_minutes=min_minutes)
    print(f"🧹 Viajes con duración <= {min_minutes} min eliminados: {removed:,}")

    out.parent.mkdir(parents=True, exist_ok=True)
    clean.to_parquet(out, index=False)

    print("\n==============================")
    print(f"✅ OK -> {out}")
    print(f"Filas OUT: {len(clean):,}")
    print(f"Rango:     {clean[config.STARTED_COL].min()} -> {clean[config.STARTED_COL].max()}")
    print("==============================\n")


if __name__ == "__main__":
    main()
