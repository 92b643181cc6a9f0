# core/feature_store.py
import logging

from core.feature import Feature

log = logging.getLogger(__name__)


class FeatureStore:
    def __init__(self):
        # lista de features confirmados, en orden de inserción
        self._features: list[Feature] = []

    def add(self, feature: Feature):
        """
        Agrega un feature confirmado. No hay deduplicación: el mismo
        objeto añadido dos veces aparece dos veces.
        """
        self._features.append(feature)
        log.debug("Feature %d agregado (%s)", len(self._features), feature.geometry.kind.value)

    def features(self) -> list[Feature]:
        return list(self._features)

    def __len__(self):
        return len(self._features)

    def __iter__(self):
        return iter(list(self._features))
