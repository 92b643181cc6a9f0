import unittest
from unittest.mock import MagicMock

from core.feature import Feature, Geometry, GeometryKind
from core.feature_store import FeatureStore
from core.measure import GeometryMath
from core.sketch import SketchState, SketchTracker


class TestSketchTracker(unittest.TestCase):

    def setUp(self):
        self.store = FeatureStore()
        self.tracker = SketchTracker(self.store, GeometryMath(geodesic=False))
        self.changes = []
        self.commits = []
        self.cancels = []
        self.tracker.on("sketchchange", lambda *args: self.changes.append(args))
        self.tracker.on("commit", lambda *args: self.commits.append(args))
        self.tracker.on("cancel", lambda *args: self.cancels.append(args))

    def _line_feature(self):
        return Feature(Geometry(GeometryKind.LINE, [(0, 0), (0, 0)]))

    def test_start_opens_single_session(self):
        feature = self._line_feature()
        self.tracker.start(feature)
        self.assertEqual(self.tracker.state, SketchState.SKETCHING)
        self.assertIs(self.tracker.session.feature, feature)
        self.assertEqual(self.tracker.geometry_kind(), GeometryKind.LINE)
        self.assertEqual(feature.geometry.listener_count("change"), 1)
        self.assertEqual(self.tracker.anchor(), (0, 0))

    def test_line_change_updates_measure_and_anchor(self):
        feature = self._line_feature()
        self.tracker.start(feature)
        feature.geometry.set_coordinates([(0, 0), (30, 40)])

        self.assertEqual(len(self.changes), 1)
        _feat, measurement, text, anchor = self.changes[0]
        self.assertEqual(measurement.primary, "50 m")
        self.assertEqual(text, "50 m")
        self.assertEqual(anchor, (30.0, 40.0))
        self.assertEqual(self.tracker.anchor(), (30.0, 40.0))

    def test_polygon_change_uses_interior_point(self):
        feature = Feature(Geometry(GeometryKind.POLYGON, [(0, 0), (0, 0), (0, 0)]))
        self.tracker.start(feature)
        feature.geometry.set_coordinates([(0, 0), (100, 0), (100, 100), (0, 100), (0, 0)])

        _feat, measurement, text, anchor = self.changes[-1]
        self.assertEqual(measurement.primary, "10000 m²")
        self.assertEqual(measurement.secondary, "0.4 km")
        self.assertEqual(text, "Area: 10000 m²\nPerimeter: 0.4 km")
        self.assertEqual(anchor, (50.0, 50.0))

    def test_end_commits_to_store_and_releases(self):
        feature = self._line_feature()
        self.tracker.start(feature)
        feature.geometry.set_coordinates([(0, 0), (30, 40)])

        result = self.tracker.end(feature)

        self.assertIs(result, feature)
        self.assertEqual(self.tracker.state, SketchState.IDLE)
        self.assertIsNone(self.tracker.session)
        self.assertEqual(len(self.store), 1)
        self.assertEqual(feature.properties, {"length": "50 m"})
        self.assertEqual(feature.geometry.listener_count("change"), 0)
        self.assertEqual(len(self.commits), 1)

        # cambios posteriores ya no se miden
        feature.geometry.set_coordinates([(0, 0), (300, 400)])
        self.assertEqual(len(self.changes), 1)

    def test_polygon_commit_has_area_and_perimeter_only(self):
        feature = Feature(Geometry(GeometryKind.POLYGON, [(0, 0), (100, 0), (100, 50), (0, 50), (0, 0)]))
        self.tracker.start(feature)
        self.tracker.end(feature)
        self.assertEqual(feature.properties, {"area": "5000 m²", "perimeter": "0.3 km"})

    def test_end_without_session_is_noop(self):
        feature = self._line_feature()
        with self.assertLogs('core.sketch', level='WARNING'):
            self.assertIsNone(self.tracker.end(feature))
        self.assertEqual(len(self.store), 0)
        self.assertEqual(feature.properties, {})
        self.assertEqual(self.commits, [])

    def test_cancel_discards_and_releases_once(self):
        feature = self._line_feature()
        self.tracker.start(feature)
        session = self.tracker.session

        self.tracker.cancel()
        self.assertEqual(self.tracker.state, SketchState.IDLE)
        self.assertEqual(len(self.store), 0)
        self.assertEqual(feature.geometry.listener_count("change"), 0)
        self.assertEqual(len(self.cancels), 1)
        self.assertFalse(session.release())

        self.tracker.cancel()
        self.assertEqual(len(self.cancels), 1)

    def test_start_while_sketching_replaces_session(self):
        first = self._line_feature()
        second = self._line_feature()
        self.tracker.start(first)
        with self.assertLogs('core.sketch', level='WARNING'):
            self.tracker.start(second)
        self.assertIs(self.tracker.session.feature, second)
        self.assertEqual(first.geometry.listener_count("change"), 0)
        self.assertEqual(second.geometry.listener_count("change"), 1)

    def test_repeated_sessions_grow_store_by_one(self):
        for i in range(3):
            feature = self._line_feature()
            self.tracker.start(feature)
            feature.geometry.set_coordinates([(0, 0), (i + 1, 0)])
            self.tracker.end(feature)
            self.assertEqual(len(self.store), i + 1)
        self.assertEqual([f.get("length") for f in self.store], ["1 m", "2 m", "3 m"])

    def test_swapped_math_applies_to_next_measurement(self):
        first = self._line_feature()
        self.tracker.start(first)
        first.geometry.set_coordinates([(0, 0), (30, 40)])
        self.tracker.end(first)
        self.assertEqual(first.properties, {"length": "50 m"})

        other_math = MagicMock()
        other_math.length.return_value = 1234.0
        self.tracker.set_geometry_math(other_math)
        self.assertIs(self.tracker.math, other_math)

        second = self._line_feature()
        self.tracker.start(second)
        second.geometry.set_coordinates([(0, 0), (30, 40)])
        self.assertEqual(self.changes[-1][1].primary, "1.23 km")
        self.tracker.end(second)

        self.assertEqual(second.properties, {"length": "1.23 km"})
        # lo ya confirmado no se vuelve a medir
        self.assertEqual(first.properties, {"length": "50 m"})


if __name__ == '__main__':
    unittest.main()
