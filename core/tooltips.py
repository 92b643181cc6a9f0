# core/tooltips.py
"""
Etiquetas flotantes sobre el mapa: una de ayuda que sigue al puntero y una
de medición que sigue al dibujo y queda fija al confirmarlo.

Label no depende de Qt; el lienzo (gui.MapCanvas) se encarga de pintarlas.
"""
import logging

from core.feature import GeometryKind

log = logging.getLogger(__name__)

START_MSG = "Click to start drawing"
CONTINUE_POLYGON_MSG = "Click to continue drawing the polygon"
CONTINUE_LINE_MSG = "Click to continue drawing the line"

HELP_CLASS = "ol-tooltip"
MEASURE_CLASS = "ol-tooltip ol-tooltip-measure"
STATIC_CLASS = "ol-tooltip ol-tooltip-static"
HIDDEN = "hidden"


class Label:
    def __init__(self, class_name: str, offset=(0, 0), positioning: str = "top-left"):
        self.class_name = class_name
        self.text = ""
        self.offset = tuple(offset)
        self.positioning = positioning
        self.position = None
        self._observers = []

    @property
    def classes(self) -> list[str]:
        return self.class_name.split()

    @property
    def hidden(self) -> bool:
        return HIDDEN in self.classes

    def add_class(self, name: str):
        if name not in self.classes:
            self.class_name = " ".join(self.classes + [name])
            self._changed()

    def remove_class(self, name: str):
        if name in self.classes:
            self.class_name = " ".join(c for c in self.classes if c != name)
            self._changed()

    def set_class_name(self, class_name: str):
        self.class_name = class_name
        self._changed()

    def set_text(self, text: str):
        self.text = text
        self._changed()

    def set_position(self, coordinate):
        self.position = tuple(coordinate) if coordinate is not None else None
        self._changed()

    def set_offset(self, offset):
        self.offset = tuple(offset)
        self._changed()

    def observe(self, callback):
        """El lienzo se registra aquí para repintar la etiqueta."""
        self._observers.append(callback)

    def unobserve(self, callback):
        if callback in self._observers:
            self._observers.remove(callback)

    def _changed(self):
        for cb in list(self._observers):
            cb(self)

    def __repr__(self):
        return f"Label({self.class_name!r}, {self.text!r}, pos={self.position})"


class TooltipController:
    def __init__(self, map_surface, tracker):
        self.map = map_surface
        self.tracker = tracker
        self.help_label: Label | None = None
        self.measure_label: Label | None = None
        self.committed_labels: list[Label] = []

    # --- Creación de etiquetas ---
    def create_help_label(self):
        if self.help_label is not None:
            self.map.remove_overlay(self.help_label)
        self.help_label = Label(f"{HELP_CLASS} {HIDDEN}", offset=(15, 0), positioning="center-left")
        self.help_label.text = START_MSG
        self.map.add_overlay(self.help_label)

    def create_measure_label(self):
        if self.measure_label is not None:
            self.map.remove_overlay(self.measure_label)
        self.measure_label = Label(MEASURE_CLASS, offset=(0, -15), positioning="bottom-center")
        self.map.add_overlay(self.measure_label)

    def arm(self):
        self.create_measure_label()
        self.create_help_label()

    def disarm(self):
        for label in (self.measure_label, self.help_label):
            if label is not None:
                self.map.remove_overlay(label)
        self.measure_label = None
        self.help_label = None

    # --- Eventos del puntero ---
    def help_message(self) -> str:
        kind = self.tracker.geometry_kind()
        if kind is None:
            return START_MSG
        if kind is GeometryKind.POLYGON:
            return CONTINUE_POLYGON_MSG
        return CONTINUE_LINE_MSG

    def pointer_move(self, coordinate, dragging: bool = False):
        if dragging or self.help_label is None:
            return
        self.help_label.set_text(self.help_message())
        self.help_label.set_position(coordinate)
        self.help_label.remove_class(HIDDEN)

    def viewport_leave(self):
        if self.help_label is not None:
            self.help_label.add_class(HIDDEN)

    # --- Eventos del tracker ---
    def sketch_change(self, text: str, anchor):
        if self.measure_label is None:
            return
        self.measure_label.set_text(text)
        self.measure_label.set_position(anchor)

    def commit(self):
        label = self.measure_label
        if label is None:
            log.warning("Confirmación sin etiqueta de medición activa.")
        else:
            label.set_class_name(STATIC_CLASS)
            label.set_offset((0, -7))
            self.committed_labels.append(label)
        # la etiqueta confirmada queda en el mapa; se prepara una nueva
        self.measure_label = None
        self.create_measure_label()

    def cancel(self):
        if self.measure_label is not None:
            self.measure_label.set_text("")
            self.measure_label.set_position(None)
