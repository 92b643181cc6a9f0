# core/measurer.py
"""
Convierte una geometría en texto de medición legible.

Reglas:
- Longitud > 100 m se muestra en km, si no en m.
- Área > 10000 m² se muestra en km², si no en m².
- Redondeo a 2 decimales: floor(v * 100 + 0.5) / 100 (la mitad sube hacia +inf).
"""
import math
from collections import namedtuple

from core.feature import Geometry, GeometryKind

LENGTH_KM_THRESHOLD = 100
AREA_KM2_THRESHOLD = 10000

Measurement = namedtuple("Measurement", ["primary", "secondary"])


def round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def format_number(value: float) -> str:
    """Como lo imprime un navegador: 50.0 -> "50", 1.5 -> "1.5"."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def format_length(length: float) -> str:
    if length > LENGTH_KM_THRESHOLD:
        return format_number(round2(length / 1000)) + " km"
    return format_number(round2(length)) + " m"


def format_area(area: float) -> str:
    if area > AREA_KM2_THRESHOLD:
        return format_number(round2(area / 1000000)) + " km²"
    return format_number(round2(area)) + " m²"


def measure(geometry: Geometry, geometry_math) -> Measurement:
    kind = geometry.kind
    if kind is GeometryKind.LINE:
        return Measurement(format_length(geometry_math.length(geometry)), None)
    elif kind is GeometryKind.POLYGON:
        return Measurement(
            format_area(geometry_math.area(geometry)),
            format_length(geometry_math.length(geometry)),
        )
    raise ValueError(f"Tipo de geometría no soportado: {kind}")


def label_text(geometry: Geometry, measurement: Measurement) -> str:
    """Texto de la etiqueta flotante."""
    if geometry.kind is GeometryKind.POLYGON:
        return f"Area: {measurement.primary}\nPerimeter: {measurement.secondary}"
    return measurement.primary


def measurement_properties(geometry: Geometry, measurement: Measurement) -> dict[str, str]:
    kind = geometry.kind
    if kind is GeometryKind.LINE:
        return {"length": measurement.primary}
    elif kind is GeometryKind.POLYGON:
        return {"area": measurement.primary, "perimeter": measurement.secondary}
    raise ValueError(f"Tipo de geometría no soportado: {kind}")
