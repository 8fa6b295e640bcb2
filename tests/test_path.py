from tracepath.models import ProjectedPoint
from tracepath.path import build_path, build_segment_paths, format_number


def test_build_path_move_then_lines():
    points = [ProjectedPoint(0, 0), ProjectedPoint(10.5, 20.25), ProjectedPoint(30, 40)]
    assert build_path(points) == "M 0 0 L 10.5 20.25 L 30 40"


def test_build_path_needs_two_points():
    assert build_path([]) == ""
    assert build_path([ProjectedPoint(1, 2)]) == ""


def test_segment_paths_are_independent():
    paths = build_segment_paths([[ProjectedPoint(0, 0), ProjectedPoint(1, 1)], [ProjectedPoint(5, 5)]])
    assert paths == ["M 0 0 L 1 1", ""]


def test_format_number_trims_zeros():
    assert format_number(100.0) == "100"
    assert format_number(0.0) == "0"
    assert format_number(12.3456) == "12.35"
