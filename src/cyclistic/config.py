"""
config.py
=========

Rutas y parámetros compartidos por todos los scripts.

- La raíz del repo se busca subiendo directorios hasta encontrar 'data' o '.git'.
- Se puede sobreescribir con un .env (o variables de entorno):
    CYCLISTIC_DATA_DIR=...
    CYCLISTIC_REPORTS_DIR=...
    CYCLISTIC_DUCKDB_THREADS=8
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Carga variables desde .env si existe (si no existe, no pasa nada)
load_dotenv()


def find_project_root(start: Path | None = None) -> Path:
    """Sube directorios hasta encontrar una carpeta 'data' o '.git'."""
    cur = (start or Path.cwd()).resolve()
    for _ in range(6):
        if (cur / "data").exists() or (cur / ".git").exists():
            return cur
        cur = cur.parent
    return (start or Path.cwd()).resolve()


def env_path(name: str, default: Path) -> Path:
    """Path desde una variable de entorno, o el default si no está definida."""
    value = os.getenv(name)
    return Path(value).expanduser() if value else default


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} tiene que ser un entero, no {value!r}") from None


# =========================
# Rutas
# =========================

ROOT = find_project_root()

DATA_DIR = env_path("CYCLISTIC_DATA_DIR", ROOT / "data")
REPORTS_DIR = env_path("CYCLISTIC_REPORTS_DIR", ROOT / "reports")

# Silver: tabla de viajes ya cargada (la ingesta de los CSV mensuales va aparte)
SILVER_TRIPS = DATA_DIR / "silver" / "divvy_trips.parquet"
CLEAN_TRIPS = DATA_DIR / "silver" / "divvy_trips_clean.parquet"

# Gold: estaciones canónicas (1 fila por station_id)
GOLD_DIR = DATA_DIR / "gold"
STATION_COORDS = GOLD_DIR / "station_coords.parquet"
STATION_COORDS_CSV = GOLD_DIR / "station_coords.csv"

TABLES_DIR = REPORTS_DIR / "tables"

# DuckDB usa varios hilos si puede
DUCKDB_THREADS = env_int("CYCLISTIC_DUCKDB_THREADS", 8)


# =========================
# Columnas (esquema Divvy)
# =========================

RIDER_COL = "member_casual"
RIDEABLE_COL = "rideable_type"
STARTED_COL = "started_at"
ENDED_COL = "ended_at"

RIDER_TYPES = ("member", "casual")


def station_columns(prefix: str) -> dict[str, str]:
    """
    Columnas de estación para un lado del viaje ('start' o 'end'):
        {"station_id": "end_station_id", "station_name": ..., "lat": ..., "lng": ...}
    """
    if prefix not in ("start", "end"):
        raise ValueError(f"prefix tiene que ser 'start' o 'end', no {prefix!r}")
    return {
        "station_id": f"{prefix}_station_id",
        "station_name": f"{prefix}_station_name",
        "lat": f"{prefix}_lat",
        "lng": f"{prefix}_lng",
    }
