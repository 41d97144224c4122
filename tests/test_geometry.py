from shapely.geometry import LineString, MultiPolygon, Point, Polygon

from data.geometry import geometry_area, polygon_area, ring_signed_area


def test_square_has_area_four():
    square = Polygon([(0, 0), (2, 0), (2, 2), (0, 2)])
    assert geometry_area(square) == 4.0


def test_square_with_hole():
    polygon = Polygon(
        [(0, 0), (2, 0), (2, 2), (0, 2)],
        holes=[[(0.5, 0.5), (1.5, 0.5), (1.5, 1.5), (0.5, 1.5)]],
    )
    assert geometry_area(polygon) == 3.0


def test_hole_winding_does_not_matter():
    outer = [(0, 0), (2, 0), (2, 2), (0, 2)]
    hole = [(0.5, 0.5), (1.5, 0.5), (1.5, 1.5), (0.5, 1.5)]
    same_direction = Polygon(outer, holes=[hole])
    opposite_direction = Polygon(outer, holes=[list(reversed(hole))])
    assert polygon_area(same_direction) == polygon_area(opposite_direction) == 3.0


def test_ring_orientation_sign():
    ccw = [(0, 0), (1, 0), (1, 1), (0, 1), (0, 0)]
    assert ring_signed_area(ccw) == 1.0
    assert ring_signed_area(list(reversed(ccw))) == -1.0


def test_clockwise_polygon_is_unsigned():
    clockwise = Polygon([(0, 0), (0, 2), (2, 2), (2, 0)])
    assert geometry_area(clockwise) == 4.0


def test_ring_is_implicitly_closed():
    assert ring_signed_area([(0, 0), (3, 0), (3, 3), (0, 3)]) == 9.0


def test_degenerate_rings_have_zero_area():
    assert ring_signed_area([]) == 0.0
    assert ring_signed_area([(0, 0), (1, 1)]) == 0.0
    assert ring_signed_area([(0, 0), (1, 1), (2, 2), (0, 0)]) == 0.0


def test_multipolygon_sums_parts():
    multi = MultiPolygon(
        [
            Polygon([(0, 0), (1, 0), (1, 1), (0, 1)]),
            Polygon([(5, 5), (7, 5), (7, 7), (5, 7)]),
        ]
    )
    assert geometry_area(multi) == 5.0


def test_other_geometries_have_zero_area():
    assert geometry_area(None) == 0.0
    assert geometry_area(Point(1, 1)) == 0.0
    assert geometry_area(LineString([(0, 0), (1, 1)])) == 0.0
    assert geometry_area(Polygon()) == 0.0


def test_large_coordinates_keep_precision():
    x0, y0 = 139.0, 35.0
    polygon = Polygon([(x0, y0), (x0 + 0.5, y0), (x0 + 0.5, y0 + 0.5), (x0, y0 + 0.5)])
    assert abs(geometry_area(polygon) - 0.25) < 1e-12
