# core/interaction.py
import logging
import math

from core.events import EventEmitter
from core.feature import Feature, Geometry, GeometryKind

log = logging.getLogger(__name__)

# vértices mínimos para poder terminar el dibujo
MIN_POINTS = {GeometryKind.LINE: 2, GeometryKind.POLYGON: 3}


class DrawInteraction(EventEmitter):
    """
    Interacción de dibujo: traduce clics del lienzo en un feature.

    - Primer clic: emite "drawstart" con un Feature nuevo.
    - Clics siguientes: agregan vértices. Mover el puntero actualiza el
      vértice provisional (la geometría emite "change").
    - Doble clic, clic sobre el primer vértice (polígono) o sobre el último
      (línea): emite "drawend".
    - abort(): emite "drawabort" y nunca "drawend".
    """

    def __init__(self, kind: GeometryKind, snap_tolerance: float = 0.0):
        super().__init__()
        self.kind = kind
        self.snap_tolerance = snap_tolerance
        self.map = None
        self._feature: Feature | None = None
        self._points: list[tuple[float, float]] = []

    @property
    def active(self) -> bool:
        return self._feature is not None

    def set_map(self, map_surface):
        if map_surface is None and self.active:
            self.abort()
        self.map = map_surface

    def _sketch_coords(self, cursor):
        coords = list(self._points)
        if cursor is not None:
            coords.append(tuple(cursor))
        if self.kind is GeometryKind.POLYGON and coords:
            coords.append(self._points[0])
        return coords

    def _near(self, a, b) -> bool:
        return math.hypot(a[0] - b[0], a[1] - b[1]) <= self.snap_tolerance

    def handle_click(self, coordinate):
        coord = (float(coordinate[0]), float(coordinate[1]))
        if not self.active:
            self._points = [coord]
            self._feature = Feature(Geometry(self.kind, self._sketch_coords(coord)))
            self.emit("drawstart", self._feature)
            self._feature.geometry.set_coordinates(self._sketch_coords(coord))
            return

        enough = len(self._points) >= MIN_POINTS[self.kind]
        if enough and self.kind is GeometryKind.POLYGON and self._near(coord, self._points[0]):
            self.finish()
            return
        if enough and self.kind is GeometryKind.LINE and self._near(coord, self._points[-1]):
            self.finish()
            return
        if coord == self._points[-1]:
            return
        self._points.append(coord)
        self._feature.geometry.set_coordinates(self._sketch_coords(coord))

    def handle_pointer_move(self, coordinate):
        if not self.active:
            return
        self._feature.geometry.set_coordinates(self._sketch_coords(coordinate))

    def handle_double_click(self, coordinate):
        if not self.active:
            return
        coord = (float(coordinate[0]), float(coordinate[1]))
        if coord != self._points[-1]:
            self._points.append(coord)
        if len(self._points) >= MIN_POINTS[self.kind]:
            self.finish()

    def finish(self):
        """Termina el dibujo en curso, si tiene vértices suficientes."""
        if not self.active or len(self._points) < MIN_POINTS[self.kind]:
            return None
        feature = self._feature
        feature.geometry.set_coordinates(self._sketch_coords(None))
        self._feature = None
        self._points = []
        self.emit("drawend", feature)
        return feature

    def abort(self):
        if not self.active:
            return
        feature = self._feature
        self._feature = None
        self._points = []
        log.debug("Dibujo abortado (%s)", self.kind.value)
        self.emit("drawabort", feature)
