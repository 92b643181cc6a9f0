# exporters/geojson_exporter.py
import json
import logging

from pyproj import ProjError, Transformer

from core.feature import Feature, GeometryKind

log = logging.getLogger(__name__)

DEFAULT_FILENAME = "data.geojson"


class GeoJSONExporter:
    @staticmethod
    def _geometry_dict(feature: Feature, transformer=None) -> dict:
        geometry = feature.geometry
        coords = geometry.coordinates
        if transformer is not None:
            # ProjError se propaga hacia export()
            coords = [transformer.transform(x, y) for x, y in coords]
        coords = [[x, y] for x, y in coords]

        if geometry.kind is GeometryKind.LINE:
            return {"type": GeometryKind.LINE.value, "coordinates": coords}
        elif geometry.kind is GeometryKind.POLYGON:
            return {"type": GeometryKind.POLYGON.value, "coordinates": [coords]}
        raise ValueError(f"Tipo de geometría '{geometry.kind}' no soportado por GeoJSON.")

    @staticmethod
    def build_feature_collection(features: list[Feature],
                                 source_crs: str | None = None,
                                 target_crs: str | None = None) -> dict:
        """
        Construye el FeatureCollection. Sin target_crs las coordenadas se
        escriben tal cual están en el lienzo.
        """
        transformer = None
        if target_crs and source_crs and target_crs != source_crs:
            transformer = Transformer.from_crs(source_crs, target_crs, always_xy=True)

        entries = []
        for feat in features:
            entries.append({
                "type": "Feature",
                "geometry": GeoJSONExporter._geometry_dict(feat, transformer),
                "properties": dict(feat.properties),
            })
        return {"type": "FeatureCollection", "features": entries}

    @staticmethod
    def to_string(features: list[Feature], **kwargs) -> str:
        doc = GeoJSONExporter.build_feature_collection(features, **kwargs)
        return json.dumps(doc, ensure_ascii=False)

    @staticmethod
    def export(features: list[Feature], filename: str, **kwargs) -> str:
        if not filename.lower().endswith((".geojson", ".json")):
            raise ValueError("El nombre de archivo debe terminar en .geojson o .json")

        try:
            text = GeoJSONExporter.to_string(features, **kwargs)
        except (ValueError, ProjError) as e:
            raise RuntimeError(f"Error al preparar datos GeoJSON: {e}")

        try:
            with open(filename, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise RuntimeError(f"Error al crear el archivo GeoJSON '{filename}': {e}")

        log.info("Exportados %d features a %s", len(features), filename)
        return filename

    @staticmethod
    def read_features(text: str) -> list[tuple[GeometryKind, list[tuple[float, float]], dict]]:
        """Lee un documento exportado: lista de (tipo, coordenadas, propiedades)."""
        doc = json.loads(text)
        if doc.get("type") != "FeatureCollection":
            raise ValueError("El documento no es un FeatureCollection GeoJSON.")

        result = []
        for entry in doc.get("features", []):
            geom = entry.get("geometry") or {}
            kind = GeometryKind.from_geojson(geom.get("type"))
            coords = geom.get("coordinates") or []
            if kind is GeometryKind.POLYGON:
                coords = coords[0] if coords else []
            result.append((kind, [(c[0], c[1]) for c in coords], dict(entry.get("properties") or {})))
        return result
