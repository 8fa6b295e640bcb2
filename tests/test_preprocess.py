import math

from tracepath.models import Fix
from tracepath.preprocess import (
    apply_time_window,
    filter_invalid_fixes,
    gap_threshold_ms,
    group_sessions,
    haversine_vectorized,
    sort_fixes,
    split_by_gap,
)


def _fix(ts, lat=0.0, lon=0.0, session="a"):
    return Fix(latitude=lat, longitude=lon, timestamp_ms=ts, session_id=session)


def test_split_by_gap_two_singletons():
    fixes = [_fix(0, 0, 0), _fix(1000, 0, 1)]
    segments = split_by_gap(fixes, 500)
    assert segments == [(fixes[0],), (fixes[1],)]


def test_split_by_gap_partitions_input():
    timestamps = [0, 100, 200, 900, 950, 2000, 2001, 2600]
    fixes = [_fix(ts) for ts in timestamps]
    segments = split_by_gap(fixes, 500)
    assert [fix for segment in segments for fix in segment] == fixes
    assert [len(segment) for segment in segments] == [3, 2, 2, 1]
    for before, after in zip(segments, segments[1:]):
        assert after[0].timestamp_ms - before[-1].timestamp_ms > 500
    for segment in segments:
        for a, b in zip(segment, segment[1:]):
            assert b.timestamp_ms - a.timestamp_ms <= 500


def test_gap_equal_to_threshold_does_not_split():
    fixes = [_fix(0), _fix(500), _fix(1000)]
    assert len(split_by_gap(fixes, 500)) == 1


def test_split_by_gap_disabled_threshold():
    fixes = [_fix(0), _fix(10_000)]
    assert split_by_gap(fixes, None) == [tuple(fixes)]
    assert split_by_gap(fixes, 0) == [tuple(fixes)]
    assert split_by_gap(fixes, -5) == [tuple(fixes)]
    assert split_by_gap([], None) == []
    assert split_by_gap([], 500) == []


def test_split_by_gap_at_session_changes():
    fixes = [_fix(0, session="a"), _fix(100, session="a"), _fix(200, session="b"), _fix(5000, session="b")]
    assert split_by_gap(fixes, None, split_sessions=True) == [tuple(fixes[:2]), tuple(fixes[2:])]
    assert [len(segment) for segment in split_by_gap(fixes, 500, split_sessions=True)] == [2, 1, 1]
    assert split_by_gap(fixes[:1], None, split_sessions=True) == [tuple(fixes[:1])]


def test_filter_invalid_fixes_counts_skipped():
    fixes = [_fix(0, 1.0, 1.0), _fix(1, math.nan, 1.0), _fix(2, 1.0, math.inf), _fix(3, 2.0, 2.0)]
    valid, skipped = filter_invalid_fixes(fixes)
    assert skipped == 2
    assert [fix.timestamp_ms for fix in valid] == [0, 3]


def test_sort_and_time_window():
    fixes = [_fix(300), _fix(100), _fix(200)]
    ordered = sort_fixes(fixes)
    assert [fix.timestamp_ms for fix in ordered] == [100, 200, 300]
    assert [fix.timestamp_ms for fix in apply_time_window(ordered, 150, 300)] == [200, 300]
    assert [fix.timestamp_ms for fix in apply_time_window(ordered, None, 150)] == [100]
    assert apply_time_window(ordered, None, None) == ordered


def test_group_sessions_preserves_order():
    fixes = [_fix(3, session="b"), _fix(1, session="a"), _fix(2, session="b"), _fix(4, session="a")]
    sessions = group_sessions(fixes)
    assert [session.identifier for session in sessions] == ["a", "b"]
    assert [fix.timestamp_ms for fix in sessions[0].fixes] == [1, 4]
    assert [fix.timestamp_ms for fix in sessions[1].fixes] == [2, 3]


def test_gap_threshold_from_interval():
    assert gap_threshold_ms(5, 3) == 15 * 60_000
    assert gap_threshold_ms(1) == 3 * 60_000
    assert gap_threshold_ms(5, 0) is None


def test_haversine_one_degree_of_latitude():
    distance = haversine_vectorized(0.0, 0.0, 1.0, 0.0)
    assert abs(float(distance) - 111.19) < 0.01
