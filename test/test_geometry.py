# test/test_geometry.py
from advisor.utils.geometry import estimate_distance, expand_bbox, format_meters, split_bands


def test_distance_person_close():
    # (0.5 * 640) / (2 * tan(30°) * 200)
    assert estimate_distance((0, 0, 200, 200), 640) == 1.39


def test_distance_unknown_for_degenerate_box():
    assert estimate_distance((10, 10, 0, 50), 640) is None
    assert estimate_distance((10, 10, -5, 50), 640) is None


def test_distance_monotonic():
    assert estimate_distance((0, 0, 50, 10), 640) > estimate_distance((0, 0, 100, 10), 640)
    assert estimate_distance((0, 0, 100, 10), 1280) > estimate_distance((0, 0, 100, 10), 640)


def test_format_meters_drops_trailing_zeros():
    assert format_meters(5.0) == "5"
    assert format_meters(1.5) == "1.5"
    assert format_meters(13.86) == "13.86"


def test_expand_bbox_around_center():
    assert expand_bbox((100, 50, 40, 90), 1.5, 640, 480) == (90, 27, 60, 135)


def test_expand_bbox_clipped_to_frame():
    x, y, w, h = expand_bbox((620, 460, 40, 40), 1.5, 640, 480)
    assert (x, y) == (610, 450)
    assert x + w == 640 and y + h == 480


def test_split_bands_three_equal_rows():
    assert split_bands((90, 27, 60, 135)) == [
        (90, 27, 60, 45),
        (90, 72, 60, 45),
        (90, 117, 60, 45),
    ]
