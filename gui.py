import logging
import os

from PySide6.QtCore import Qt, QPointF, QRectF
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QToolBar,
    QStyle,
    QMessageBox,
    QVBoxLayout,
    QHBoxLayout,
    QComboBox,
    QPushButton,
    QLabel,
    QFileDialog,
    QGraphicsView,
    QGraphicsScene,
)

from config_dialog import ConfigDialog
from core.draw_mode import DrawModeController
from core.events import EventEmitter, un_by_key
from core.feature_store import FeatureStore
from core.geometry import GeometryBuilder
from core.log import setup_logging
from core.settings import DEFAULT_SETTINGS, geometry_math_from_settings, merge_settings
from core.sketch import SketchTracker
from core.tooltips import STATIC_CLASS, TooltipController
from exporters.geojson_exporter import DEFAULT_FILENAME, GeoJSONExporter

log = logging.getLogger("gui")

MAP_CENTER = (-11000000.0, 4600000.0)
MAP_EXTENT = 2000.0        # metros visibles al arrancar
SNAP_PIXELS = 8

TOOLTIP_STYLE = ("background-color: rgba(0, 0, 0, 128); border-radius: 4px; color: white;"
                 " padding: 4px 8px; font-size: 12px;")
MEASURE_STYLE = TOOLTIP_STYLE + " font-weight: bold;"
STATIC_STYLE = ("background-color: #ffcc33; color: black; border: 1px solid white;"
                " border-radius: 4px; padding: 4px 8px; font-size: 12px;")
DARK_STYLE = "QWidget{background:#2b2b2b;color:#ddd;}"


class MapCanvas(QGraphicsView):
    """
    Lienzo del mapa. Las coordenadas de escena son las del mapa (EPSG:3857,
    eje y hacia arriba). Emite "pointermove" (coordenada, arrastrando) y
    "viewportleave"; pinta las etiquetas (Label) como QLabel superpuestos.
    """

    def __init__(self, center=MAP_CENTER, extent=MAP_EXTENT, parent=None):
        super().__init__(parent)
        self.events = EventEmitter()
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)
        self.setMinimumSize(400, 300)
        self.setStyleSheet("background-color:white; border:1px solid #ccc; padding:0px;")
        self.setMouseTracking(True)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setFocusPolicy(Qt.StrongFocus)
        self.scale(1, -1)

        cx, cy = center
        self._initial_rect = QRectF(cx - extent / 2, cy - extent / 2, extent, extent)
        self._scene.setSceneRect(QRectF(cx - extent * 50, cy - extent * 50, extent * 100, extent * 100))
        self._fitted = False

        self._overlays = {}        # Label -> QLabel
        self._interactions = []
        self._interaction_keys = {}
        self._sketch_key = None
        self._sketch_item = None
        self._feature_items = []
        self._pan_origin = None

    # --- Superficie del mapa ---
    def on(self, event_name: str, callback):
        return self.events.on(event_name, callback)

    def add_overlay(self, label):
        widget = QLabel(self.viewport())
        widget.setAttribute(Qt.WA_TransparentForMouseEvents)
        self._overlays[label] = widget
        label.observe(self._sync_overlay)
        self._sync_overlay(label)

    def remove_overlay(self, label):
        label.unobserve(self._sync_overlay)
        widget = self._overlays.pop(label, None)
        if widget is not None:
            widget.hide()
            widget.deleteLater()

    def add_interaction(self, interaction):
        interaction.set_map(self)
        self._interactions.append(interaction)
        self._interaction_keys[interaction] = [
            interaction.on("drawstart", self._on_draw_start),
            interaction.on("drawend", self._on_draw_stop),
            interaction.on("drawabort", self._on_draw_stop),
        ]

    def remove_interaction(self, interaction):
        if interaction not in self._interactions:
            return
        self._interactions.remove(interaction)
        interaction.set_map(None)
        un_by_key(self._interaction_keys.pop(interaction, []))

    def map_units_per_pixel(self) -> float:
        return 1.0 / abs(self.transform().m11()) if self.transform().m11() else 1.0

    # --- Dibujo ---
    def _on_draw_start(self, feature):
        self._sketch_key = feature.geometry.on("change", self._draw_sketch)
        self._draw_sketch(feature.geometry)

    def _on_draw_stop(self, feature):
        un_by_key(self._sketch_key)
        self._sketch_key = None
        if self._sketch_item is not None:
            self._scene.removeItem(self._sketch_item)
            self._sketch_item = None

    def _draw_sketch(self, geometry):
        if self._sketch_item is not None:
            self._scene.removeItem(self._sketch_item)
            self._sketch_item = None
        path = GeometryBuilder.path_from_coords(geometry.coordinates)
        if path is None:
            return
        brush = GeometryBuilder.sketch_brush(geometry.kind)
        if brush is not None:
            self._sketch_item = self._scene.addPath(path, GeometryBuilder.sketch_pen(), brush)
        else:
            self._sketch_item = self._scene.addPath(path, GeometryBuilder.sketch_pen())

    def show_features(self, features):
        for item in self._feature_items:
            self._scene.removeItem(item)
        self._feature_items = []
        for path, pen, brush in GeometryBuilder.paths_from_features(features):
            if brush is not None:
                item = self._scene.addPath(path, pen, brush)
            else:
                item = self._scene.addPath(path, pen)
            self._feature_items.append(item)

    # --- Etiquetas ---
    def _sync_overlay(self, label):
        widget = self._overlays.get(label)
        if widget is None:
            return
        widget.setText(label.text)
        if label.class_name == STATIC_CLASS:
            widget.setStyleSheet(STATIC_STYLE)
        elif "ol-tooltip-measure" in label.classes:
            widget.setStyleSheet(MEASURE_STYLE)
        else:
            widget.setStyleSheet(TOOLTIP_STYLE)

        if label.hidden or label.position is None or not label.text:
            widget.hide()
            return
        widget.adjustSize()
        p = self.mapFromScene(QPointF(label.position[0], label.position[1]))
        ox, oy = label.offset
        w, h = widget.width(), widget.height()
        if label.positioning == "bottom-center":
            x, y = p.x() - w // 2 + ox, p.y() - h + oy
        elif label.positioning == "center-left":
            x, y = p.x() + ox, p.y() - h // 2 + oy
        else:
            x, y = p.x() + ox, p.y() + oy
        widget.move(int(x), int(y))
        widget.show()
        widget.raise_()

    def _reposition_overlays(self):
        for label in list(self._overlays):
            self._sync_overlay(label)

    # --- Eventos Qt ---
    def showEvent(self, event):
        super().showEvent(event)
        if not self._fitted:
            self.fitInView(self._initial_rect, Qt.KeepAspectRatio)
            self._fitted = True

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._reposition_overlays()

    def scrollContentsBy(self, dx, dy):
        super().scrollContentsBy(dx, dy)
        self._reposition_overlays()

    def wheelEvent(self, event):
        factor = 1.25 ** (event.angleDelta().y() / 120.0)
        self.scale(factor, factor)
        self._reposition_overlays()

    def _coord(self, event):
        p = self.mapToScene(event.position().toPoint())
        return (p.x(), p.y())

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            coord = self._coord(event)
            tolerance = SNAP_PIXELS * self.map_units_per_pixel()
            for interaction in list(self._interactions):
                interaction.snap_tolerance = tolerance
                interaction.handle_click(coord)
        elif event.button() in (Qt.RightButton, Qt.MiddleButton):
            self._pan_origin = event.position().toPoint()

    def mouseReleaseEvent(self, event):
        if event.button() in (Qt.RightButton, Qt.MiddleButton):
            self._pan_origin = None

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.LeftButton:
            coord = self._coord(event)
            for interaction in list(self._interactions):
                interaction.handle_double_click(coord)

    def mouseMoveEvent(self, event):
        dragging = event.buttons() != Qt.NoButton
        if self._pan_origin is not None:
            pos = event.position().toPoint()
            delta = pos - self._pan_origin
            self._pan_origin = pos
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - delta.x())
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - delta.y())
        coord = self._coord(event)
        self.events.emit("pointermove", coord, dragging)
        if not dragging:
            for interaction in list(self._interactions):
                interaction.handle_pointer_move(coord)

    def leaveEvent(self, event):
        super().leaveEvent(event)
        self.events.emit("viewportleave")

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            for interaction in list(self._interactions):
                interaction.abort()
            return
        super().keyPressEvent(event)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("GeoMeasure: Medición de Longitudes y Áreas")
        self.settings = dict(DEFAULT_SETTINGS)
        self.store = FeatureStore()
        self.tracker = SketchTracker(self.store, geometry_math_from_settings(self.settings))
        self._build_ui()
        self._create_toolbar()

        self.tooltips = TooltipController(self.canvas, self.tracker)
        self.draw_mode = DrawModeController(
            self.canvas, self.tracker, self.tooltips,
            selector_value=self.cb_type.currentData(),
        )
        self.tracker.on("commit", self._on_feature_committed)
        self.draw_mode.start()

    # --- Métodos de UI ---
    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QVBoxLayout(central)

        self.canvas = MapCanvas()
        main_layout.addWidget(self.canvas, 1)

        form = QHBoxLayout()
        form.addWidget(QLabel("Tipo de medición:"))
        self.cb_type = QComboBox()
        self.cb_type.addItem("Longitud (LineString)", "length")
        self.cb_type.addItem("Área (Polygon)", "area")
        self.cb_type.currentIndexChanged.connect(self._on_type_changed)
        form.addWidget(self.cb_type)
        form.addStretch()
        self.lbl_count = QLabel("Features: 0")
        form.addWidget(self.lbl_count)
        btn = QPushButton("Exportar")
        btn.clicked.connect(self._on_export)
        form.addWidget(btn)
        main_layout.addLayout(form)

    def _create_toolbar(self):
        tb = QToolBar("Principal"); self.addToolBar(tb)
        actions_data = [
            (QStyle.SP_DialogSaveButton, "Exportar GeoJSON", self._on_export),
            None,
            (QStyle.SP_FileDialogDetailedView, "Configuraciones", self._on_settings),
        ]
        for item_data in actions_data:
            if item_data is None: tb.addSeparator(); continue
            action = QAction(self.style().standardIcon(item_data[0]), item_data[1], self)
            action.triggered.connect(item_data[2])
            tb.addAction(action)

    # --- Slots ---
    def _on_type_changed(self, _index):
        self.draw_mode.select(self.cb_type.currentData())
        self.canvas.setFocus()

    def _on_feature_committed(self, feature, measurement):
        self.canvas.show_features(self.store)
        self.lbl_count.setText(f"Features: {len(self.store)}")

    def _on_export(self):
        start = os.path.join(self.settings["default_dir"] or "", DEFAULT_FILENAME)
        path, _ = QFileDialog.getSaveFileName(self, "Exportar GeoJSON", start, "GeoJSON (*.geojson *.json)")
        if not path: return
        try:
            GeoJSONExporter.export(self.store.features(), path)
            QMessageBox.information(self, "Éxito", f"Archivo guardado en:\n{path}")
        except (ValueError, RuntimeError) as e:
            log.error("Exportación fallida: %s", e)
            QMessageBox.critical(self, "Error de Exportación", f"Error al exportar GeoJSON:\n{e}")

    def _on_settings(self):
        dlg = ConfigDialog(self, self.settings)
        if dlg.exec():
            self.settings = merge_settings(self.settings, dlg.get_values())
            self._apply_settings()

    def _apply_settings(self):
        self.tracker.set_geometry_math(geometry_math_from_settings(self.settings))
        QApplication.instance().setStyleSheet(DARK_STYLE if self.settings["dark_mode"] else "")
        log.info("Configuración aplicada: %s", self.settings)

    def closeEvent(self, event):
        self.draw_mode.shutdown()
        super().closeEvent(event)


def main():
    import sys
    setup_logging()
    app = QApplication(sys.argv)
    win = MainWindow()
    win.resize(1000, 750)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
