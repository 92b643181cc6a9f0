# core/feature.py
from enum import Enum

from core.events import EventEmitter


class GeometryKind(Enum):
    """Tipo de geometría que puede dibujar el usuario. El valor es el tipo GeoJSON."""
    LINE = "LineString"
    POLYGON = "Polygon"

    @classmethod
    def from_selector(cls, value: str) -> "GeometryKind":
        """Traduce el valor del selector de la UI ("length" / "area")."""
        if value == "length":
            return cls.LINE
        if value == "area":
            return cls.POLYGON
        raise ValueError(f"Tipo de medición '{value}' no reconocido. Esperados: 'length' o 'area'.")

    @classmethod
    def from_geojson(cls, type_name: str) -> "GeometryKind":
        for kind in cls:
            if kind.value == type_name:
                return kind
        raise ValueError(f"Tipo de geometría GeoJSON '{type_name}' no soportado.")


class Geometry(EventEmitter):
    """
    Geometría editable durante el dibujo.
    LINE: lista de (x, y). POLYGON: un único anillo cerrado (primero == último).
    Cada set_coordinates() emite "change" con la propia geometría.
    """

    def __init__(self, kind: GeometryKind, coords: list[tuple[float, float]] | None = None):
        super().__init__()
        self._kind = kind
        self._coords = [tuple(c) for c in coords] if coords else []

    @property
    def kind(self) -> GeometryKind:
        return self._kind

    @property
    def coordinates(self) -> list[tuple[float, float]]:
        return list(self._coords)

    def set_coordinates(self, coords: list[tuple[float, float]]):
        self._coords = [(float(x), float(y)) for x, y in coords]
        self.emit("change", self)

    def first_coordinate(self):
        return self._coords[0] if self._coords else None

    def last_coordinate(self):
        return self._coords[-1] if self._coords else None

    def __repr__(self):
        return f"Geometry({self._kind.value}, {len(self._coords)} coords)"


class Feature:
    """Una geometría más sus propiedades de texto (length, area, perimeter)."""

    def __init__(self, geometry: Geometry, properties: dict[str, str] | None = None):
        self.geometry = geometry
        self.properties = dict(properties or {})

    def set_properties(self, values: dict[str, str]):
        self.properties.update(values)

    def get(self, key: str, default=None):
        return self.properties.get(key, default)

    def __repr__(self):
        return f"Feature({self.geometry!r}, {self.properties!r})"
