from pathlib import Path

from photo_reconciler.models import FileRecord


def rec(path="/src/img.jpg", size=100, mtime=10, category="", fingerprint=None):
    return FileRecord(path=Path(path), size=size, mtime=mtime, category=category, fingerprint=fingerprint)


def test_equal_is_reflexive_and_symmetric():
    a = rec()
    b = rec()
    assert a == a
    assert a == b and b == a
    assert a.compare(b) == 0 and b.compare(a) == 0


def test_same_metadata_at_different_paths_is_not_equal():
    a = rec("/src/a/img.jpg")
    b = rec("/src/b/img.jpg")
    assert a != b
    assert a.compare(b) != 0


def test_shared_fingerprint_overrides_metadata():
    a = rec("/src/a.jpg", size=1, mtime=1, fingerprint="abc")
    b = rec("/dst/b.jpg", size=2, mtime=2, category="jpeg", fingerprint="abc")
    assert a == b
    assert a.compare(b) == 0


def test_one_sided_fingerprint_falls_back_to_metadata():
    assert rec(fingerprint="abc") == rec()
    assert rec(fingerprint="abc") != rec(size=5)


def test_different_fingerprints_with_same_metadata_are_not_equal():
    a = rec(fingerprint="aaa")
    b = rec(fingerprint="bbb")
    assert a != b
    assert a.compare(b) == -1
    assert b.compare(a) == 1


def test_compare_is_dominated_by_path():
    a = rec("/a/x.jpg", size=999, mtime=999, category="raw")
    b = rec("/b/x.jpg", size=1, mtime=1)
    assert a < b
    assert b > a


def test_compare_tie_breaks_category_then_time_then_size():
    assert rec(category="") < rec(category="jpeg")
    assert rec(mtime=5, size=900) < rec(mtime=10, size=1)
    assert rec(size=5) < rec(size=10)
    assert rec(size=10) > rec(size=5)
    assert rec(size=10) >= rec(size=10)
    assert rec(size=5) <= rec(size=10)


def test_compare_is_strict_total_order():
    records = [
        rec(path, size, mtime, category)
        for path in ("/a.jpg", "/b.jpg")
        for category in ("", "raw")
        for mtime in (1, 2)
        for size in (1, 2)
    ]
    for a in records:
        for b in records:
            if a is b:
                assert a.compare(b) == 0
            else:
                assert a != b
                assert (a.compare(b) < 0) != (b.compare(a) < 0)

    expected = sorted(records, key=lambda r: (str(r.path), r.category, r.mtime, r.size))
    assert sorted(reversed(records)) == expected


def test_records_deduplicate_in_sets():
    assert len({rec(), rec(), rec(size=2)}) == 2


def test_name_is_filename_only():
    assert rec("/deep/dir/IMG_0001.ARW").name == "IMG_0001.ARW"
