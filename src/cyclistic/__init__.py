"""Caso de estudio Cyclistic (Divvy): limpieza, estaciones canónicas y resúmenes."""

__version__ = "0.1.0"
