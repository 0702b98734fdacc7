# tests/test_runio.py
import pytest

from multimerge.errors import UnsortedRunError
from multimerge.runio import RunReader, RunWriter, check_sorted, field_key, open_runs


def test_writer_then_reader(tmp_path):
    p = tmp_path / "nested" / "dir" / "run.txt"
    with RunWriter(str(p)) as w:
        n = w.write_all(["alpha", "beta\tx", ""])
    assert n == 3

    r = RunReader(str(p))
    assert list(r) == ["alpha", "beta\tx", ""]
    assert r.lineno == 3
    assert r._f.closed, "reader closes its file at EOF"


def test_reader_context_manager(tmp_path):
    p = tmp_path / "r.txt"
    p.write_text("1\n2\n", encoding="utf-8")
    with RunReader(str(p)) as r:
        assert next(r) == "1"
    assert r._f.closed


def test_open_runs_missing_file(tmp_path):
    good = tmp_path / "a.txt"
    good.write_text("x\n", encoding="utf-8")
    with pytest.raises(FileNotFoundError):
        open_runs([str(good), str(tmp_path / "missing.txt")])


def test_field_key_whole_line():
    assert field_key() is None
    assert field_key(numeric=True)("2.5") == 2.5


def test_field_key_column():
    key = field_key(2, sep=",")
    assert key("a,b,c") == "b"
    assert key("only") == "", "missing fields sort as empty"
    num = field_key(3, sep=",", numeric=True)
    assert num("a,b,10") == 10.0
    with pytest.raises(ValueError):
        num("a,b,ten")


def test_field_key_rejects_zero():
    with pytest.raises(ValueError):
        field_key(0)


def test_check_sorted_passes_through():
    assert list(check_sorted([1, 2, 2, 3])) == [1, 2, 2, 3]
    assert list(check_sorted([3, 3, 1], reverse=True)) == [3, 3, 1]
    assert list(check_sorted(["bb", "a"], key=len, reverse=True)) == ["bb", "a"]


def test_check_sorted_reports_first_violation():
    it = check_sorted(["a", "c", "b", "a"], name="run7")
    assert next(it) == "a"
    assert next(it) == "c"
    with pytest.raises(UnsortedRunError) as ei:
        next(it)
    err = ei.value
    assert (err.name, err.lineno, err.prev, err.cur) == ("run7", 3, "c", "b")
    assert isinstance(err, ValueError)
    assert "run7:3" in str(err)


def test_check_sorted_keyed_pairs():
    calls = []

    def key(rec):
        calls.append(rec)
        return len(rec)

    got = list(check_sorted(["a", "bb", "cc"], key=key, keyed=True))
    assert got == [(1, "a"), (2, "bb"), (2, "cc")]
    assert calls == ["a", "bb", "cc"]
