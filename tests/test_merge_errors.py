# tests/test_merge_errors.py
import pytest

from multimerge import merge, EngineState, FailureKind

KEYFUNCS = [None, lambda x: x]


def nexterr_immediate():
    yield from ()
    raise ZeroDivisionError


def nexterr_delayed():
    yield from range(10)
    raise ZeroDivisionError


class CmpErr:
    "Dummy element that always raises an error during comparison"
    def __eq__(self, other):
        raise ZeroDivisionError
    __ne__ = __lt__ = __le__ = __gt__ = __ge__ = __eq__


def drain_expecting(exc_type, m):
    with pytest.raises(exc_type):
        list(m)
    assert m.state is EngineState.TERMINATED
    assert list(m) == [], "nothing may follow a failure"


def test_does_not_suppress_index_error():
    # a user generator's IndexError must reach the caller as IndexError
    def iterable():
        s = list(range(10))
        for i in range(20):
            yield s[i]
    m = merge(iterable(), iterable())
    drain_expecting(IndexError, m)
    assert m.failure is FailureKind.SEQUENCE_PULL


@pytest.mark.parametrize("reverse", [False, True])
@pytest.mark.parametrize("key", KEYFUNCS)
def test_comparison_failure_during_build(key, reverse):
    args = [[CmpErr()]] + [range(100)] * 10
    m = merge(*args, key=key, reverse=reverse)
    drain_expecting(ZeroDivisionError, m)
    assert m.failure is FailureKind.COMPARISON


@pytest.mark.parametrize("reverse", [False, True])
@pytest.mark.parametrize("key", KEYFUNCS)
def test_comparison_failure_mid_merge(key, reverse):
    for n in range(2, 10):
        args = [[0, 1, 2, 3, 4, 5, 6, 7, 8, 9, CmpErr()]] * n
        m = merge(*args, key=key, reverse=reverse)
        drain_expecting(ZeroDivisionError, m)
        assert m.failure is FailureKind.COMPARISON


@pytest.mark.parametrize("reverse", [False, True])
@pytest.mark.parametrize("key", KEYFUNCS)
def test_pull_failure_during_build(key, reverse):
    for n in range(1, 10):
        m = merge(*[nexterr_immediate() for _ in range(n)], key=key, reverse=reverse)
        drain_expecting(ZeroDivisionError, m)
        assert m.failure is FailureKind.SEQUENCE_PULL


@pytest.mark.parametrize("reverse", [False, True])
@pytest.mark.parametrize("key", KEYFUNCS)
def test_pull_failure_mid_merge(key, reverse):
    for n in range(1, 10):
        m = merge(*[nexterr_delayed() for _ in range(n)], key=key, reverse=reverse)
        drain_expecting(ZeroDivisionError, m)
        assert m.failure is FailureKind.SEQUENCE_PULL


@pytest.mark.parametrize("reverse", [False, True])
def test_key_failure(reverse):
    m = merge(range(10), range(10), key=lambda x: x // 0, reverse=reverse)
    drain_expecting(ZeroDivisionError, m)
    assert m.failure is FailureKind.KEY_COMPUTATION


@pytest.mark.parametrize("reverse", [False, True])
def test_key_not_callable(reverse):
    m = merge(range(10), key=object(), reverse=reverse)
    drain_expecting(TypeError, m)
    assert m.failure is FailureKind.KEY_COMPUTATION


def test_key_failure_mid_merge_keeps_earlier_items():
    def key(x):
        if x == 3:
            raise KeyError(x)
        return x

    m = merge([0, 3], [1, 2], key=key)
    assert next(m) == 0
    with pytest.raises(KeyError):
        next(m)
    assert m.failure is FailureKind.KEY_COMPUTATION
    assert list(m) == []


def test_not_iterable_argument():
    m = merge([1, 2], 5)
    drain_expecting(TypeError, m)
    assert m.failure is FailureKind.SEQUENCE_PULL


def test_failure_releases_tree():
    m = merge(nexterr_delayed(), range(3))
    drain_expecting(ZeroDivisionError, m)
    assert m.root is None


class Abort(BaseException):
    """Stands in for KeyboardInterrupt and friends."""


def test_base_exception_in_key_terminates():
    def key(x):
        if x == 3:
            raise Abort
        return x

    m = merge([0, 3, 6], [1, 2, 4, 5], key=key)
    assert next(m) == 0
    with pytest.raises(Abort):
        next(m)
    assert m.state is EngineState.TERMINATED
    assert m.failure is FailureKind.KEY_COMPUTATION
    assert list(m) == [], "no item may be skipped after an interrupt"


def test_base_exception_in_comparison_terminates():
    class Touchy(int):
        def __lt__(self, other):
            raise Abort

    m = merge([0, 1], [Touchy(2)])
    with pytest.raises(Abort):
        next(m)
    assert m.state is EngineState.TERMINATED
    assert m.failure is FailureKind.COMPARISON
    assert m.root is None


def test_base_exception_in_pull_terminates():
    def source():
        yield 0
        raise Abort

    m = merge(source(), [5, 6])
    assert next(m) == 0
    with pytest.raises(Abort):
        next(m)
    assert m.state is EngineState.TERMINATED
    assert m.failure is FailureKind.SEQUENCE_PULL
    assert list(m) == []
