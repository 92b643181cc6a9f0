# core/settings.py
"""
Valores de configuración de la sesión. No se guardan en disco: el diálogo
de configuraciones los edita mientras la aplicación está abierta.
"""
from core.measure import GeometryMath

DEFAULT_SETTINGS = {
    "dark_mode": False,
    "geodesic": True,       # medir sobre la esfera (True) o en el plano del lienzo
    "default_dir": "",      # carpeta propuesta al exportar
    "source_crs": "EPSG:3857",
}


def merge_settings(base: dict, override: dict | None) -> dict:
    """Devuelve una copia de base con los valores de override. Ignora claves desconocidas."""
    out = dict(base)
    for key, value in (override or {}).items():
        if key in DEFAULT_SETTINGS:
            out[key] = value
    return out


def geometry_math_from_settings(settings: dict):
    """GeometryMath según las opciones "geodesic" y "source_crs"."""
    values = merge_settings(DEFAULT_SETTINGS, settings)
    return GeometryMath(geodesic=bool(values["geodesic"]), source_crs=values["source_crs"])
