"""Tests for Overpass query construction."""
import pytest

from conftest import TOKYO_STATION


def test_circle_query_uses_around_on_nodes_only():
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    query = build_query(build_circle(TOKYO_STATION, 1000))

    assert query.startswith("[out:json][timeout:25];")
    for cat in ["amenity", "shop", "office", "public_transport"]:
        assert f"node[{cat}](around:1000,35.6812,139.7671);" in query
    assert "way[" not in query
    assert "relation[" not in query
    assert "poly:" not in query
    assert query.rstrip().endswith("out skel qt;")


def test_circle_query_category_order():
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    query = build_query(build_circle(TOKYO_STATION, 500))
    positions = [query.index(f"node[{cat}]") for cat in ["amenity", "shop", "office", "public_transport"]]
    assert positions == sorted(positions)


def test_freeform_query_uses_poly_with_lat_lon_order(square_ring):
    from urban_density.core.geometry import from_ring
    from urban_density.core.query import build_query, poly_filter_ring

    area = from_ring(square_ring)
    ring_text = poly_filter_ring(area)
    query = build_query(area)

    assert ring_text.startswith("35.6812 139.7671 ")
    assert len(ring_text.split()) == 2 * len(square_ring)
    for cat in ["amenity", "shop", "office", "public_transport"]:
        for element_type in ["node", "way", "relation"]:
            assert f'{element_type}[{cat}](poly:"{ring_text}");' in query
    assert query.count("poly:") == 12
    assert "around:" not in query
    assert query.rstrip().endswith("out skel center qt;")


def test_query_respects_custom_categories_and_timeout():
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    query = build_query(build_circle(TOKYO_STATION, 1000), ["shop"], timeout_s=60)
    assert query.startswith("[out:json][timeout:60];")
    assert query.count("node[") == 1


def test_query_rejects_empty_categories():
    from urban_density.core.exceptions import InvalidInputError
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    with pytest.raises(InvalidInputError, match="tag category"):
        build_query(build_circle(TOKYO_STATION, 1000), [])


def test_query_rejects_injection_in_category():
    from urban_density.core.exceptions import InvalidInputError
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    with pytest.raises(InvalidInputError, match="Invalid tag category"):
        build_query(build_circle(TOKYO_STATION, 1000), ['shop](around:1,0,0);out;('])


def test_query_rejects_geometry_without_vertices():
    from urban_density.core.exceptions import InvalidInputError
    from urban_density.core.geometry import build_circle
    from urban_density.core.query import build_query

    empty = build_circle(TOKYO_STATION, 1000).model_copy(update={"ring": []})
    with pytest.raises(InvalidInputError, match="no vertices"):
        build_query(empty)


@pytest.mark.parametrize("value,expected", [
    (1000.0, "1000"),
    (35.6812, "35.6812"),
    (-0.0, "0"),
    (0.000001, "0.000001"),
    (139.76710004, "139.7671"),
])
def test_number_formatting_has_no_exponent(value, expected):
    from urban_density.core.query import _fmt_number

    assert _fmt_number(value) == expected
