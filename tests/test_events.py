import unittest
from unittest.mock import MagicMock

from core.events import EventEmitter, un_by_key
from core.settings import DEFAULT_SETTINGS, geometry_math_from_settings, merge_settings


class TestEventEmitter(unittest.TestCase):

    def test_emit_in_registration_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on("change", lambda value: calls.append(("a", value)))
        emitter.on("change", lambda value: calls.append(("b", value)))
        emitter.emit("change", 1)
        self.assertEqual(calls, [("a", 1), ("b", 1)])

    def test_key_releases_exactly_once(self):
        emitter = EventEmitter()
        callback = MagicMock()
        key = emitter.on("change", callback)
        self.assertEqual(un_by_key(key), 1)
        self.assertEqual(un_by_key(key), 0)
        self.assertEqual(emitter.listener_count("change"), 0)
        emitter.emit("change")
        callback.assert_not_called()

    def test_un_by_key_accepts_lists_and_none(self):
        emitter = EventEmitter()
        keys = [emitter.on("a", MagicMock()), emitter.on("b", MagicMock())]
        self.assertEqual(un_by_key(keys), 2)
        self.assertEqual(un_by_key(None), 0)

    def test_failing_listener_does_not_stop_others(self):
        emitter = EventEmitter()
        after = MagicMock()
        emitter.on("change", MagicMock(side_effect=RuntimeError("boom")))
        emitter.on("change", after)
        with self.assertLogs('core.events', level='ERROR'):
            emitter.emit("change", 5)
        after.assert_called_once_with(5)


class TestSettings(unittest.TestCase):

    def test_merge_ignores_unknown_keys(self):
        merged = merge_settings(DEFAULT_SETTINGS, {"geodesic": False, "zoom": 3})
        self.assertFalse(merged["geodesic"])
        self.assertNotIn("zoom", merged)
        self.assertTrue(DEFAULT_SETTINGS["geodesic"])

    def test_merge_with_none(self):
        self.assertEqual(merge_settings(DEFAULT_SETTINGS, None), DEFAULT_SETTINGS)

    def test_geometry_math_follows_geodesic_option(self):
        math = geometry_math_from_settings(DEFAULT_SETTINGS)
        self.assertTrue(math.geodesic)
        self.assertEqual(math.source_crs, "EPSG:3857")

        planar = geometry_math_from_settings(merge_settings(DEFAULT_SETTINGS, {"geodesic": False}))
        self.assertFalse(planar.geodesic)
        self.assertIsNot(planar, math)


if __name__ == '__main__':
    unittest.main()
