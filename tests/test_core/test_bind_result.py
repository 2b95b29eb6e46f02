import pytest

from confbind import BindResult, NoSuchElementError


def test_unbound_result():
    result = BindResult.of(None)

    assert not result.is_bound()
    assert not result
    assert result is BindResult.of(None)
    assert repr(result) == "BindResult(<unbound>)"
    with pytest.raises(NoSuchElementError):
        result.get()


def test_bound_result():
    result = BindResult.of(8080)

    assert result.is_bound()
    assert result.get() == 8080
    assert result == BindResult.of(8080)
    assert repr(result) == "BindResult(8080)"


def test_falsy_values_are_bound():
    assert BindResult.of(0).is_bound()
    assert BindResult.of("").get() == ""
    assert BindResult.of([]).is_bound()


def test_or_else_variants():
    unbound = BindResult.of(None)
    bound = BindResult.of("value")

    assert unbound.or_else("default") == "default"
    assert bound.or_else("default") == "value"
    assert unbound.or_else_get(lambda: "supplied") == "supplied"
    assert bound.or_else_get(lambda: pytest.fail("supplier must not run")) == "value"
    assert unbound.or_else_create(list) == []


def test_or_else_raise():
    with pytest.raises(KeyError):
        BindResult.of(None).or_else_raise(lambda: KeyError("missing"))

    assert BindResult.of(1).or_else_raise(lambda: KeyError("missing")) == 1


def test_map_and_if_bound():
    seen = []

    BindResult.of(2).if_bound(seen.append)
    BindResult.of(None).if_bound(seen.append)

    assert seen == [2]
    assert BindResult.of(2).map(lambda v: v * 10).get() == 20
    assert not BindResult.of(2).map(lambda v: None).is_bound()
    assert not BindResult.of(None).map(lambda v: v * 10).is_bound()


def test_hash_follows_value():
    assert hash(BindResult.of("a")) == hash(BindResult.of("a"))
    assert len({BindResult.of(None), BindResult.of(None)}) == 1
