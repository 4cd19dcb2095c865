"""
build_station_coords.py
=======================

OBJETIVO:
- En los viajes de Divvy cada estación aparece con MUCHAS variantes:
    mismo end_station_id, pero lat/lng con más o menos decimales,
    nombres con typos, coordenadas GPS de la bici (no del anclaje)...
- Para pintar mapas necesitamos 1 sola coordenada por estación.

REGLA:
1) Contar cuántas veces aparece cada combinación (station_id, station_name, lat, lng)
2) Para cada station_id, quedarse con la combinación que más se repite
3) Empates: nombre más pequeño (orden alfabético), luego lat, luego lng.
   Los nulos van siempre al final.

NOTAS:
- Filas sin station_id se descartan (no hay nada que canonizar).
- Nombre o coordenadas nulas cuentan como una variante más.
- No validamos rangos de coordenadas: lo que entra, sale.

ENTRADA:
- data/silver/divvy_trips_clean.parquet (o divvy_trips.parquet si no existe)

SALIDA:
- data/gold/station_coords.parquet
- data/gold/station_coords.csv

Uso:
  Desde la raíz del repo:
    python -m cyclistic.gold.build_station_coords
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from cyclistic import config
from cyclistic.models import TripObservation, observations_to_frame


# Clave completa de agrupación
VARIANT_KEYS = ["station_id", "station_name", "lat", "lng"]
STATION_COLUMNS = list(VARIANT_KEYS)

# Orden para elegir la variante ganadora dentro de cada station_id
RANK_COLUMNS = ["station_id", "n", "station_name", "lat", "lng"]
RANK_ASCENDING = [True, False, True, True, True]

# Schema fijo de salida (si cambia entre ejecuciones, los joins de BI petan)
STATION_SCHEMA = pa.schema(
    [
        pa.field("station_id", pa.string()),
        pa.field("station_name", pa.string()),
        pa.field("lat", pa.float64()),
        pa.field("lng", pa.float64()),
    ]
).with_metadata(None)

Trips = Union[pd.DataFrame, Iterable[TripObservation]]


# =========================
# Helpers
# =========================

def station_observations(trips: Trips, prefix: str = "end") -> pd.DataFrame:
    """
    Saca del DataFrame de viajes SOLO las columnas de estación de un lado
    y las renombra a station_id, station_name, lat, lng.
    """
    if not isinstance(trips, pd.DataFrame):
        if prefix != "end":
            raise ValueError("TripObservation solo lleva columnas end_*")
        trips = observations_to_frame(trips)

    cols = config.station_columns(prefix)
    missing = [c for c in cols.values() if c not in trips.columns]
    if missing:
        raise KeyError(f"Faltan columnas de estación: {missing}")

    obs = trips[list(cols.values())].rename(columns={v: k for k, v in cols.items()})
    # Categóricas -> object: el desempate es alfabético, no por orden de categorías
    obs["station_id"] = obs["station_id"].astype(object)
    obs["station_name"] = obs["station_name"].astype(object)
    obs["lat"] = pd.to_numeric(obs["lat"].astype(object), errors="coerce").astype("float64")
    obs["lng"] = pd.to_numeric(obs["lng"].astype(object), errors="coerce").astype("float64")
    return obs


def count_variants(obs: pd.DataFrame) -> pd.DataFrame:
    """
    GROUP BY (station_id, station_name, lat, lng) -> n
    Sin station_id no se cuenta nada.
    """
    obs = obs[obs["station_id"].notna()]
    if obs.empty:
        return pd.DataFrame({c: pd.Series(dtype="object") for c in VARIANT_KEYS}).assign(
            n=pd.Series(dtype="int64")
        )

    # dropna=False: un nombre nulo o una lat nula es una variante más
    return (
        obs.groupby(VARIANT_KEYS, dropna=False, observed=True, sort=False)
        .size()
        .reset_index(name="n")
    )


def pick_most_frequent(counts: pd.DataFrame) -> pd.DataFrame:
    """
    Para cada station_id, la variante con mayor n.
    Las claves de counts son únicas, así que el orden es total y no depende
    del orden de entrada.
    """
    if counts.empty:
        return pd.DataFrame({c: pd.Series(dtype="object") for c in STATION_COLUMNS})

    ranked = counts.sort_values(RANK_COLUMNS, ascending=RANK_ASCENDING, na_position="last")
    best = ranked.drop_duplicates(subset=["station_id"], keep="first")
    return best[STATION_COLUMNS].reset_index(drop=True)


# =========================
# API
# =========================

def count_station_variants(trips: Trips, prefix: str = "end") -> pd.DataFrame:
    """Cuenta de observaciones por (station_id, station_name, lat, lng)."""
    return count_variants(station_observations(trips, prefix))


def resolve_canonical_stations(trips: Trips, prefix: str = "end") -> pd.DataFrame:
    """
    1 fila por station_id no nulo con su (station_name, lat, lng) más frecuente.

    Acepta un DataFrame con columnas {prefix}_station_id, {prefix}_station_name,
    {prefix}_lat, {prefix}_lng o una lista de TripObservation.
    El input no se modifica.
    """
    return pick_most_frequent(count_station_variants(trips, prefix))


def resolve_all_stations(trips: pd.DataFrame) -> pd.DataFrame:
    """
    Igual que resolve_canonical_stations, pero contando inicio y final juntos
    (una estación es la misma aunque se use para salir o para llegar).
    """
    obs = pd.concat(
        [station_observations(trips, "start"), station_observations(trips, "end")],
        ignore_index=True,
    )
    return pick_most_frequent(count_variants(obs))


def canonical_station_mapping(canonical: pd.DataFrame) -> dict:
    """
    DataFrame canónico -> {station_id: (station_name, lat, lng)}
    Los nulos de pandas salen como None.
    """
    def clean(value):
        return None if pd.isna(value) else value

    mapping = {}
    for row in canonical.itertuples(index=False):
        mapping[row.station_id] = (clean(row.station_name), clean(row.lat), clean(row.lng))
    return mapping


def to_station_table(canonical: pd.DataFrame) -> pa.Table:
    """DataFrame canónico -> Arrow Table con STATION_SCHEMA."""
    df = canonical[STATION_COLUMNS].copy()
    df["station_id"] = df["station_id"].map(lambda x: None if pd.isna(x) else str(x))
    df["station_name"] = df["station_name"].map(lambda x: None if pd.isna(x) else str(x))

    table = pa.Table.from_pandas(df, preserve_index=False)
    # safe=False permite object->string, int->float, etc.
    table = table.cast(STATION_SCHEMA, safe=False)
    return table.replace_schema_metadata(None)


def write_station_coords(canonical: pd.DataFrame, out_parquet: Path, out_csv: Path | None = None) -> None:
    """Escribe parquet (snappy, schema fijo) y opcionalmente un CSV para Excel/BI."""
    out_parquet.parent.mkdir(parents=True, exist_ok=True)
    pq.write_table(to_station_table(canonical), out_parquet, compression="snappy")

    if out_csv is not None:
        out_csv.parent.mkdir(parents=True, exist_ok=True)
        canonical.to_csv(out_csv, index=False, encoding="utf-8")


def pick_input_file(candidates: list[Path]) -> Path:
    """Devuelve el primer input que exista (en orden)."""
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(
        "No encuentro ningún parquet de viajes. He mirado:\n- "
        + "\n- ".join(str(x) for x in candidates)
    )


# =========================
# Main
# =========================

def main(prefix: str = "end") -> None:
    inp = pick_input_file([config.CLEAN_TRIPS, config.SILVER_TRIPS])
    print(f"📁 ROOT: {config.ROOT}")
    print(f"📥 IN : {inp}")
    print(f"📤 OUT: {config.STATION_COORDS}")

    cols = list(config.station_columns(prefix).values())
    trips = pd.read_parquet(inp, columns=cols)
    print(f"🔢 Filas input: {len(trips):,}")

    counts = count_station_variants(trips, prefix)
    canonical = pick_most_frequent(counts)

    n_null = int(trips[cols[0]].isna().sum())
    multi = counts.groupby("station_id").size()
    print(f"🧹 Filas sin {cols[0]} (descartadas): {n_null:,}")
    print(f"   Variantes distintas: {len(counts):,}")
    print(f"   Estaciones con >1 variante: {int((multi > 1).sum()):,}")

    write_station_coords(canonical, config.STATION_COORDS, config.STATION_COORDS_CSV)

    print("\n==============================")
    print(f"✅ OK -> {config.STATION_COORDS}")
    print(f"Estaciones: {len(canonical):,}")
    print("==============================\n")
    print(canonical.head(5).to_string(index=False))


if __name__ == "__main__":
    main()
