import unittest
from unittest.mock import MagicMock, patch

from pyproj import ProjError

from core.feature import Geometry, GeometryKind
from core.measure import GeometryMath, planar_area, planar_length, ring_interior_point

SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)]


class TestPlanarMath(unittest.TestCase):

    def setUp(self):
        self.math = GeometryMath(geodesic=False)

    def test_line_length(self):
        line = Geometry(GeometryKind.LINE, [(0, 0), (30, 40), (30, 50)])
        self.assertAlmostEqual(self.math.length(line), 60.0)

    def test_polygon_area_and_perimeter(self):
        polygon = Geometry(GeometryKind.POLYGON, SQUARE)
        self.assertAlmostEqual(self.math.area(polygon), 100.0)
        self.assertAlmostEqual(self.math.length(polygon), 40.0)

    def test_degenerate_geometries_measure_zero(self):
        self.assertEqual(self.math.length(Geometry(GeometryKind.LINE)), 0.0)
        self.assertEqual(self.math.length(Geometry(GeometryKind.LINE, [(5, 5)])), 0.0)
        self.assertEqual(self.math.area(Geometry(GeometryKind.POLYGON, [(1, 1), (2, 2), (1, 1)])), 0.0)
        self.assertEqual(self.math.area(Geometry(GeometryKind.LINE, SQUARE)), 0.0)

    def test_helpers(self):
        self.assertEqual(planar_length([]), 0.0)
        self.assertEqual(planar_area([(0, 0), (1, 1)]), 0.0)
        # orientación horaria: el área sigue siendo positiva
        self.assertAlmostEqual(planar_area(list(reversed(SQUARE))), 100.0)


class TestInteriorPoint(unittest.TestCase):

    def test_square_center(self):
        self.assertEqual(ring_interior_point(SQUARE), (5.0, 5.0))

    def test_concave_ring_point_is_inside(self):
        u_shape = [(0, 0), (30, 0), (30, 30), (20, 30), (20, 10),
                   (10, 10), (10, 30), (0, 30), (0, 0)]
        x, y = ring_interior_point(u_shape)
        self.assertEqual(y, 15.0)
        self.assertTrue(0 < x < 10 or 20 < x < 30)

    def test_degenerate_rings(self):
        self.assertEqual(ring_interior_point([]), (0.0, 0.0))
        self.assertEqual(ring_interior_point([(3.0, 4.0)]), (3.0, 4.0))
        self.assertEqual(ring_interior_point([(1.0, 1.0), (5.0, 1.0), (1.0, 1.0)]), (1.0, 1.0))

    def test_math_service_uses_ring(self):
        polygon = Geometry(GeometryKind.POLYGON, SQUARE)
        self.assertEqual(GeometryMath(geodesic=False).interior_point(polygon), (5.0, 5.0))


class TestGeodesicMath(unittest.TestCase):

    def test_length_near_equator(self):
        # 100 m en EPSG:3857 junto al ecuador, medidos sobre la esfera de radio 6371008.8
        line = Geometry(GeometryKind.LINE, [(0.0, 0.0), (100.0, 0.0)])
        self.assertAlmostEqual(GeometryMath().length(line), 99.89, delta=0.05)

    def test_area_near_equator(self):
        polygon = Geometry(GeometryKind.POLYGON, [(0, 0), (100, 0), (100, 100), (0, 100), (0, 0)])
        self.assertAlmostEqual(GeometryMath().area(polygon), 9977.8, delta=5.0)

    @patch('core.measure.Transformer')
    def test_proj_error_falls_back_to_planar(self, MockTransformerClass):
        mock_transformer_instance = MagicMock()
        MockTransformerClass.from_crs.return_value = mock_transformer_instance
        mock_transformer_instance.transform.side_effect = ProjError("Mocked Transform error")

        math = GeometryMath(geodesic=True)
        line = Geometry(GeometryKind.LINE, [(0, 0), (30, 40)])
        polygon = Geometry(GeometryKind.POLYGON, SQUARE)
        with self.assertLogs('core.measure', level='WARNING'):
            self.assertAlmostEqual(math.length(line), 50.0)
            self.assertAlmostEqual(math.area(polygon), 100.0)
        MockTransformerClass.from_crs.assert_called_once_with("EPSG:3857", "EPSG:4326", always_xy=True)


if __name__ == '__main__':
    unittest.main()
