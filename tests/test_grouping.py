from datetime import datetime
from pathlib import Path

from photo_reconciler.grouping import TemporalGrouper

from conftest import BASE_NS, HOUR_NS


def grouper_for(times, gap_hours=39):
    """Grouper reading mtimes from a {Path: ns} dict instead of the disk."""
    return TemporalGrouper(gap_hours=gap_hours, mtime_of=lambda p: times[p])


def test_empty_input_gives_no_groups():
    assert TemporalGrouper().group([]) == []


def test_single_directory_gives_one_group():
    d = Path("/photos/a")
    assert grouper_for({d: BASE_NS}).group([d]) == [[d]]


def test_gap_over_threshold_starts_new_group():
    a, b, c = Path("/p/a"), Path("/p/b"), Path("/p/c")
    times = {a: BASE_NS, b: BASE_NS + 10 * HOUR_NS, c: BASE_NS + 50 * HOUR_NS}
    assert grouper_for(times).group([c, a, b]) == [[a, b], [c]]


def test_exactly_threshold_stays_in_group():
    a, b = Path("/p/a"), Path("/p/b")
    times = {a: BASE_NS, b: BASE_NS + 39 * HOUR_NS}
    assert grouper_for(times).group([a, b]) == [[a, b]]


def test_one_hour_over_threshold_starts_new_group():
    a, b = Path("/p/a"), Path("/p/b")
    times = {a: BASE_NS, b: BASE_NS + 40 * HOUR_NS}
    assert grouper_for(times).group([a, b]) == [[a], [b]]


def test_partial_hour_over_threshold_stays_in_group():
    # Whole hours only: 39.5h counts as 39h
    a, b = Path("/p/a"), Path("/p/b")
    times = {a: BASE_NS, b: BASE_NS + 39 * HOUR_NS + HOUR_NS // 2}
    assert grouper_for(times).group([a, b]) == [[a, b]]


def test_gap_is_measured_from_group_start():
    a, b, c = Path("/p/a"), Path("/p/b"), Path("/p/c")
    times = {a: BASE_NS, b: BASE_NS + 30 * HOUR_NS, c: BASE_NS + 60 * HOUR_NS}
    assert grouper_for(times).group([a, b, c]) == [[a, b], [c]]


def test_ties_keep_input_order():
    a, b, c = Path("/p/a"), Path("/p/b"), Path("/p/c")
    times = {a: BASE_NS, b: BASE_NS, c: BASE_NS}
    assert grouper_for(times).group([c, a, b]) == [[c, a, b]]


def test_gap_hours_is_configurable():
    a, b = Path("/p/a"), Path("/p/b")
    times = {a: BASE_NS, b: BASE_NS + 10 * HOUR_NS}
    assert grouper_for(times, gap_hours=5).group([a, b]) == [[a], [b]]


def test_directories_near_epoch_still_group():
    a, b = Path("/p/a"), Path("/p/b")
    times = {a: 0, b: HOUR_NS}
    assert grouper_for(times).group([b, a]) == [[a, b]]


def test_sessions_read_directory_mtimes(tmp_path, make_dir):
    first = make_dir(tmp_path / "first", mtime=BASE_NS)
    second = make_dir(tmp_path / "second", mtime=BASE_NS + 100 * HOUR_NS)
    missing = tmp_path / "gone"

    sessions = TemporalGrouper().group_sessions([second, missing, first])
    assert [s.paths for s in sessions] == [[first], [second]]
    assert sessions[0].timestamps == [BASE_NS]
    assert sessions[1].since == datetime.fromtimestamp((BASE_NS + 100 * HOUR_NS) / 1e9)
    assert len(sessions[0]) == 1
    assert list(sessions[1]) == [second]
