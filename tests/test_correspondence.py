import pytest

from meshcorres.correspondence import (
    TriangleCorrespondence,
    load_correspondences,
    save_correspondences,
    sort_unique,
    strip_correspondences,
)


def C(src, tgt, d):
    return TriangleCorrespondence(src, tgt, d)


def test_sort_key_orders_target_then_distance_then_source():
    entry = C(4, 1, 0.25)
    assert entry.sort_key() == (1, 0.25, 4)


def test_sort_unique_sorts_and_removes_duplicates():
    entries = [C(3, 1, 0.5), C(2, 0, 0.9), C(1, 0, 0.1), C(3, 1, 0.5), C(0, 1, 0.5)]
    result = sort_unique(entries)
    keys = [e.sort_key() for e in result]
    assert keys == sorted(keys)
    assert len(result) == len(set(keys)) == 4
    assert result[0] == C(1, 0, 0.1)


def test_sort_unique_empty():
    assert sort_unique([]) == []


def test_strip_keeps_nearest_per_target():
    entries = [
        C(0, 0, 3.0), C(1, 0, 1.0), C(2, 0, 2.0),
        C(3, 1, 5.0), C(4, 1, 4.0),
        C(5, 2, 1.0),
    ]
    result = strip_correspondences(entries, 2)
    assert result == [C(1, 0, 1.0), C(2, 0, 2.0), C(4, 1, 4.0), C(3, 1, 5.0), C(5, 2, 1.0)]


def test_strip_with_large_limit_equals_sort_unique():
    entries = [C(0, 2, 1.0), C(1, 2, 0.5), C(1, 2, 0.5), C(2, 0, 0.3)]
    assert strip_correspondences(entries, 10) == sort_unique(entries)


def test_strip_limit_one_gives_one_per_target():
    entries = [C(s, t, float(s + t)) for s in range(4) for t in range(3)]
    result = strip_correspondences(entries, 1)
    assert [e.target for e in result] == [0, 1, 2]
    for entry in result:
        same = [e.dist_sq for e in entries if e.target == entry.target]
        assert entry.dist_sq == min(same)


def test_strip_empty():
    assert strip_correspondences([], 3) == []


def test_save_format(tmp_path):
    path = tmp_path / "out.tricorrs"
    save_correspondences(path, [C(0, 2, 0.5)])
    assert path.read_text() == "1\n0, 2,  0.500000000\n"


def test_round_trip(tmp_path):
    path = tmp_path / "c.tricorrs"
    entries = [C(5, 1, 0.125), C(0, 3, 2.5), C(7, 7, 0.0)]
    save_correspondences(path, entries)
    assert load_correspondences(path) == entries


def test_round_trip_empty(tmp_path):
    path = tmp_path / "empty.tricorrs"
    save_correspondences(path, [])
    assert load_correspondences(path) == []


def test_load_accepts_compact_separators(tmp_path):
    path = tmp_path / "c.tricorrs"
    path.write_text("2\n1,2,0.5\n3,  4,   1e-3\n")
    assert load_correspondences(path) == [C(1, 2, 0.5), C(3, 4, 0.001)]


def test_load_too_few_entries(tmp_path):
    path = tmp_path / "bad.tricorrs"
    path.write_text("3\n1, 2, 0.5\n")
    with pytest.raises(ValueError):
        load_correspondences(path)


def test_load_missing_count(tmp_path):
    path = tmp_path / "bad.tricorrs"
    path.write_text("hello\n")
    with pytest.raises(ValueError):
        load_correspondences(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_correspondences(tmp_path / "absent.tricorrs")