# core/measure.py
"""
Servicio de cálculo geométrico: longitud, área y punto interior.

En modo geodésico las coordenadas (por defecto EPSG:3857, las del lienzo) se
transforman a WGS84 con pyproj y se miden sobre una esfera de radio
6371008.8 m. En modo plano se usa distancia euclídea y la fórmula de Shoelace.
"""
import logging
import math

from pyproj import Geod, ProjError, Transformer

from core.feature import Geometry, GeometryKind

log = logging.getLogger(__name__)

EARTH_RADIUS = 6371008.8


def planar_length(coords: list[tuple[float, float]]) -> float:
    length = 0.0
    if len(coords) < 2: return 0.0
    for i in range(len(coords) - 1):
        p1 = coords[i]
        p2 = coords[i + 1]
        length += math.sqrt((p2[0] - p1[0])**2 + (p2[1] - p1[1])**2)
    return length


def planar_area(coords: list[tuple[float, float]]) -> float:
    if len(coords) < 3: return 0.0
    # Fórmula de Shoelace (Área de Gauss); un anillo cerrado aporta 0 en el cierre
    area = 0.0
    n = len(coords)
    for i in range(n):
        j = (i + 1) % n
        area += coords[i][0] * coords[j][1]
        area -= coords[j][0] * coords[i][1]
    return math.fabs(area * 0.5)


def ring_interior_point(ring: list[tuple[float, float]]) -> tuple[float, float]:
    """
    Punto dentro del anillo: se corta el anillo con la horizontal que pasa
    por el centro de su extensión vertical y se toma el punto medio del
    tramo interior más ancho.
    """
    if not ring:
        return (0.0, 0.0)
    ys = [c[1] for c in ring]
    y = (min(ys) + max(ys)) / 2.0

    intersections = []
    for (x1, y1), (x2, y2) in zip(ring, ring[1:] + ring[:1]):
        if (y1 <= y < y2) or (y2 <= y < y1):
            intersections.append(x1 + (y - y1) / (y2 - y1) * (x2 - x1))
    intersections.sort()

    best_width = -1.0
    best_x = None
    for i in range(0, len(intersections) - 1, 2):
        width = intersections[i + 1] - intersections[i]
        if width > best_width:
            best_width = width
            best_x = (intersections[i] + intersections[i + 1]) / 2.0

    if best_x is None or best_width <= 0.0:
        # Anillo degenerado (colineal o con un solo vértice)
        return tuple(ring[0])
    return (best_x, y)


class GeometryMath:
    def __init__(self, geodesic: bool = True, source_crs: str = "EPSG:3857"):
        self.geodesic = geodesic
        self.source_crs = source_crs
        self._transformer = None
        self._geod = Geod(a=EARTH_RADIUS, b=EARTH_RADIUS)

    def _to_lonlat(self, coords):
        if self._transformer is None:
            self._transformer = Transformer.from_crs(self.source_crs, "EPSG:4326", always_xy=True)
        lons, lats = [], []
        for x, y in coords:
            lon, lat = self._transformer.transform(x, y)
            lons.append(lon)
            lats.append(lat)
        return lons, lats

    def length(self, geometry: Geometry) -> float:
        """Longitud de la línea o perímetro del anillo, en metros."""
        coords = geometry.coordinates
        if len(coords) < 2:
            return 0.0
        if not self.geodesic:
            return planar_length(coords)
        try:
            lons, lats = self._to_lonlat(coords)
            return float(self._geod.line_length(lons, lats))
        except ProjError as pe:
            log.warning("Error de transformación al medir longitud (%s); se usa cálculo plano.", pe)
            return planar_length(coords)

    def area(self, geometry: Geometry) -> float:
        """Área absoluta del polígono en m². Las líneas no tienen área."""
        if geometry.kind is not GeometryKind.POLYGON:
            return 0.0
        coords = geometry.coordinates
        if len(set(coords)) < 3:
            return 0.0
        if not self.geodesic:
            return planar_area(coords)
        try:
            lons, lats = self._to_lonlat(coords)
            area, _perimeter = self._geod.polygon_area_perimeter(lons, lats)
            return abs(float(area))
        except ProjError as pe:
            log.warning("Error de transformación al medir área (%s); se usa cálculo plano.", pe)
            return planar_area(coords)

    def interior_point(self, geometry: Geometry) -> tuple[float, float]:
        return ring_interior_point(geometry.coordinates)
