# core/sketch.py
import logging
import weakref
from enum import Enum

from core.events import EventEmitter, un_by_key
from core.feature import Feature, GeometryKind
from core.feature_store import FeatureStore
from core.measure import GeometryMath
from core.measurer import label_text, measure, measurement_properties

log = logging.getLogger(__name__)


class SketchState(Enum):
    IDLE = "idle"
    SKETCHING = "sketching"
    COMMITTING = "committing"


class SketchSession:
    """
    Sesión de dibujo en curso. Guarda una referencia débil al feature, la
    clave de la suscripción "change" de su geometría y el último ancla.
    """

    def __init__(self, feature: Feature):
        self._feature_ref = weakref.ref(feature)
        self.kind = feature.geometry.kind
        self.listener_key = None
        self.anchor = feature.geometry.first_coordinate() or (0.0, 0.0)

    @property
    def feature(self):
        return self._feature_ref()

    def release(self) -> bool:
        """Suelta la suscripción. Solo la primera llamada tiene efecto."""
        released = un_by_key(self.listener_key) > 0
        self.listener_key = None
        return released


class SketchTracker(EventEmitter):
    """
    Máquina de estados IDLE -> SKETCHING -> COMMITTING -> IDLE.

    Eventos emitidos:
      "sketchchange" (feature, measurement, text, anchor)
      "commit"       (feature, measurement)
      "cancel"       (feature o None)
    """

    def __init__(self, store: FeatureStore, geometry_math: GeometryMath | None = None):
        super().__init__()
        self.store = store
        self.math = geometry_math or GeometryMath()
        self.state = SketchState.IDLE
        self.session: SketchSession | None = None

    @property
    def is_sketching(self) -> bool:
        return self.state is SketchState.SKETCHING

    def geometry_kind(self) -> GeometryKind | None:
        if self.session is None:
            return None
        return self.session.kind

    def anchor(self):
        return self.session.anchor if self.session else None

    def set_geometry_math(self, geometry_math: GeometryMath):
        """Sustituye el servicio de medición; rige desde el próximo cambio de geometría."""
        self.math = geometry_math
        log.debug("Medición %s", "geodésica" if geometry_math.geodesic else "plana")

    def start(self, feature: Feature):
        if self.session is not None:
            log.warning("Inicio de dibujo con una sesión activa; se descarta la anterior.")
            self.cancel()

        session = SketchSession(feature)
        session.listener_key = feature.geometry.on("change", self._on_geometry_change)
        self.session = session
        self.state = SketchState.SKETCHING
        log.debug("Dibujo iniciado (%s)", session.kind.value)

    def _on_geometry_change(self, geometry):
        session = self.session
        if session is None:
            return
        feature = session.feature
        if feature is None or feature.geometry is not geometry:
            return

        measurement = measure(geometry, self.math)
        if geometry.kind is GeometryKind.POLYGON:
            session.anchor = self.math.interior_point(geometry)
        else:
            session.anchor = geometry.last_coordinate() or session.anchor
        self.emit("sketchchange", feature, measurement, label_text(geometry, measurement), session.anchor)

    def end(self, feature: Feature):
        """Confirma el dibujo: propiedades, almacén y liberación del listener."""
        if self.session is None:
            log.warning("Fin de dibujo sin sesión activa; se ignora.")
            return None

        self.state = SketchState.COMMITTING
        session = self.session
        try:
            measurement = measure(feature.geometry, self.math)
            feature.set_properties(measurement_properties(feature.geometry, measurement))
            self.store.add(feature)
        finally:
            session.release()
            self.session = None
            self.state = SketchState.IDLE

        log.info("Feature confirmado: %s", feature.properties)
        self.emit("commit", feature, measurement)
        return feature

    def cancel(self):
        """Descarta el dibujo en curso sin guardarlo."""
        if self.session is None:
            return
        session = self.session
        session.release()
        self.session = None
        self.state = SketchState.IDLE
        log.debug("Dibujo descartado (%s)", session.kind.value)
        self.emit("cancel", session.feature)
