# core/geometry.py
from PySide6.QtGui import QBrush, QColor, QPainterPath, QPen
from PySide6.QtCore import QPointF, Qt

from core.feature import GeometryKind

FEATURE_COLOR = "#ffcc33"
FEATURE_FILL = (255, 255, 255, 51)
SKETCH_COLOR = (0, 0, 0, 128)


class GeometryBuilder:
    """
    Construye objetos de dibujo (QPainterPath) a partir de los features
    del FeatureStore o del dibujo en curso.
    """

    @staticmethod
    def path_from_coords(coords, close: bool = False):
        """QPainterPath que recorre coords; None si hay menos de 2 puntos."""
        if not coords or len(coords) < 2:
            return None
        path = QPainterPath(QPointF(coords[0][0], coords[0][1]))
        for x, y in coords[1:]:
            path.lineTo(QPointF(x, y))
        if close:
            path.closeSubpath()
        return path

    @staticmethod
    def sketch_pen():
        pen = QPen(QColor(*SKETCH_COLOR), 2)
        pen.setCosmetic(True)
        pen.setStyle(Qt.DashLine)
        return pen

    @staticmethod
    def sketch_brush(kind: GeometryKind):
        """Relleno translúcido del polígono en curso; None para las líneas."""
        if kind is GeometryKind.POLYGON:
            return QBrush(QColor(*FEATURE_FILL))
        return None

    @staticmethod
    def paths_from_features(features) -> list:
        """
        Devuelve lista de tuplas (path, pen, brush) para cada feature.
        brush es None en las líneas.
        """
        result = []

        for feat in features:
            geometry = feat.geometry
            coords = geometry.coordinates
            kind = geometry.kind

            if kind is GeometryKind.LINE:
                path = GeometryBuilder.path_from_coords(coords)
                brush = None
            elif kind is GeometryKind.POLYGON:
                # Un anillo cerrado necesita al menos 4 puntos (3 únicos + cierre)
                if len(coords) < 4:
                    continue
                path = GeometryBuilder.path_from_coords(coords, close=True)
                brush = QBrush(QColor(*FEATURE_FILL))
            else:
                continue

            if path is None:
                continue
            pen = QPen(QColor(FEATURE_COLOR), 2)
            pen.setCosmetic(True)  # ancho en píxeles, no en metros
            result.append((path, pen, brush))

        return result
