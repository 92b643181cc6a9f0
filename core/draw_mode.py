# core/draw_mode.py
import logging

from core.events import un_by_key
from core.feature import GeometryKind
from core.interaction import DrawInteraction
from core.sketch import SketchTracker
from core.tooltips import TooltipController

log = logging.getLogger(__name__)


class DrawModeController:
    """
    Mantiene exactamente una DrawInteraction en el mapa, del tipo elegido en
    el selector. Cambiar de tipo desengancha la anterior (el dibujo en curso
    se descarta) antes de enganchar la nueva.
    """

    def __init__(self, map_surface, tracker: SketchTracker, tooltips: TooltipController,
                 selector_value: str = "length", snap_tolerance: float = 0.0):
        self.map = map_surface
        self.tracker = tracker
        self.tooltips = tooltips
        self.kind = GeometryKind.from_selector(selector_value)
        self.snap_tolerance = snap_tolerance
        self.interaction: DrawInteraction | None = None
        self._interaction_keys = []
        self._map_keys = []
        self._tracker_keys = []

    def start(self):
        if self._map_keys:
            return
        self._map_keys = [
            self.map.on("pointermove", self.tooltips.pointer_move),
            self.map.on("viewportleave", self.tooltips.viewport_leave),
        ]
        self._tracker_keys = [
            self.tracker.on("sketchchange", self._on_sketch_change),
            self.tracker.on("commit", self._on_commit),
            self.tracker.on("cancel", self._on_cancel),
        ]
        self.add_interaction()

    def select(self, selector_value: str):
        """Slot del selector ("length" / "area")."""
        kind = GeometryKind.from_selector(selector_value)
        log.debug("Tipo de medición: %s", kind.value)
        self.kind = kind
        self.remove_interaction()
        self.add_interaction()

    def add_interaction(self):
        interaction = DrawInteraction(self.kind, snap_tolerance=self.snap_tolerance)
        self._interaction_keys = [
            interaction.on("drawstart", self.tracker.start),
            interaction.on("drawend", self.tracker.end),
            interaction.on("drawabort", self._on_draw_abort),
        ]
        self.interaction = interaction
        self.map.add_interaction(interaction)
        self.tooltips.arm()

    def remove_interaction(self):
        if self.interaction is None:
            return
        # quitarla del mapa aborta el dibujo en curso
        self.map.remove_interaction(self.interaction)
        self.interaction.abort()
        self.tracker.cancel()
        un_by_key(self._interaction_keys)
        self._interaction_keys = []
        self.interaction = None

    def shutdown(self):
        self.remove_interaction()
        self.tooltips.disarm()
        un_by_key(self._map_keys + self._tracker_keys)
        self._map_keys = []
        self._tracker_keys = []

    # --- Puente tracker -> etiquetas ---
    def _on_sketch_change(self, feature, measurement, text, anchor):
        self.tooltips.sketch_change(text, anchor)

    def _on_commit(self, feature, measurement):
        self.tooltips.commit()

    def _on_cancel(self, feature):
        self.tooltips.cancel()

    def _on_draw_abort(self, feature):
        self.tracker.cancel()
