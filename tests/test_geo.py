from place_validator.cache import cache_key_for
from place_validator.geo import parse_viewport_url, radius_for_zoom


def test_radius_for_zoom_known_values():
    assert radius_for_zoom(10) == 50000
    assert radius_for_zoom(11) == 25000
    assert radius_for_zoom(14) == 3125
    assert radius_for_zoom(20) == 100


def test_radius_for_zoom_unknown_falls_back_to_base():
    assert radius_for_zoom(None) == 50000
    assert radius_for_zoom("not-a-zoom") == 50000
    assert radius_for_zoom(float("nan")) == 50000


def test_radius_for_zoom_clamped_and_monotonic():
    assert radius_for_zoom(3) == 50000
    assert radius_for_zoom(-500) == 50000
    zooms = [z / 2 for z in range(0, 50)]
    radii = [radius_for_zoom(z) for z in zooms]
    assert all(a >= b for a, b in zip(radii, radii[1:]))
    assert min(radii) == 100
    assert max(radii) == 50000


def test_parse_viewport_url_with_zoom():
    url = "https://www.google.com/maps/@52.2296756,21.0122287,15.5z/data=!3m1"
    viewport = parse_viewport_url(url)
    assert viewport is not None
    assert viewport.lat == 52.2296756
    assert viewport.lng == 21.0122287
    assert viewport.zoom == 15.5


def test_parse_viewport_url_without_zoom():
    viewport = parse_viewport_url("https://www.google.com/maps/@40.7,-74.0,500m/data=x")
    assert viewport is not None
    assert (viewport.lat, viewport.lng) == (40.7, -74.0)
    assert viewport.zoom is None


def test_parse_viewport_url_rejects_missing_center():
    assert parse_viewport_url("https://www.google.com/maps/search/pizza") is None
    assert parse_viewport_url("https://www.google.com/maps/@abc,def,10z") is None
    assert parse_viewport_url("") is None


def test_cache_key_rounds_to_three_decimals():
    assert cache_key_for(52.2296756, 21.0122287, 3125) == "52.23,21.012,3125"
    assert cache_key_for(52.22949, 21.01249, 3125) == "52.229,21.012,3125"
    assert cache_key_for(52.0, -0.0001, 100) == "52,0,100"


def test_cache_key_collapses_small_pans():
    a = cache_key_for(40.71281, -74.00601, 25000)
    b = cache_key_for(40.71279, -74.00598, 25000)
    assert a == b
    assert cache_key_for(40.71281, -74.00601, 12500) != a
