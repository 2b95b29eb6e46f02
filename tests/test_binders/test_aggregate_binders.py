import collections
from dataclasses import dataclass, field
from typing import (
    Any,
    Deque,
    Dict,
    FrozenSet,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Set,
    Tuple,
)

import pytest

from confbind import Bindable, BindContext, Binder, LookupPropertySource, MapPropertySource
from confbind.binders import ArrayBinder, CollectionBinder, MapBinder, get_aggregate_binder


@dataclass
class Server:
    host: str
    port: int = 80


class Pair(NamedTuple):
    left: str
    right: str


@dataclass
class Tree:
    name: str
    children: Dict[str, "Tree"] = field(default_factory=dict)


@dataclass
class LinkedNode:
    name: str
    kids: List["LinkedNode"] = field(default_factory=list)


# -------------------------------------------------------------------
# Dispatch
# -------------------------------------------------------------------


@pytest.mark.parametrize(
    "target, expected",
    [
        (Dict[str, int], MapBinder),
        (Mapping[str, Any], MapBinder),
        (dict, MapBinder),
        (Optional[Dict[str, int]], MapBinder),
        (Tuple[int, ...], ArrayBinder),
        (Tuple[str, int], ArrayBinder),
        (List[str], CollectionBinder),
        (Set[int], CollectionBinder),
        (Deque[str], CollectionBinder),
        (Sequence[str], CollectionBinder),
        (str, type(None)),
        (Pair, type(None)),
        (Server, type(None)),
    ],
)
def test_get_aggregate_binder(target, expected):
    context = BindContext(Binder(MapPropertySource({})))

    assert type(get_aggregate_binder(Bindable.of(target), context)) is expected


# -------------------------------------------------------------------
# Maps
# -------------------------------------------------------------------


def test_scalar_map_uses_remaining_path_as_key(make_binder):
    binder = make_binder({"logging": {"level": {"root": "INFO", "com.example": "DEBUG"}}})

    levels = binder.bind("logging.level", Dict[str, str]).get()

    assert levels == {"root": "INFO", "com.example": "DEBUG"}


def test_bracketed_keys_are_kept_whole(make_binder):
    binder = make_binder({"map[a.b]": "1", "map[c/d]": "2"})

    assert binder.bind("map", Dict[str, int]).get() == {"a.b": 1, "c/d": 2}


def test_map_keys_are_converted(make_binder):
    binder = make_binder({"codes": {"404": "missing", "500": "error"}})

    assert binder.bind("codes", Dict[int, str]).get() == {404: "missing", 500: "error"}


def test_map_of_collections(make_binder):
    binder = make_binder({"groups": {"admins": ["ann", "bob"], "users": "carl,dora"}})

    groups = binder.bind("groups", Dict[str, List[str]]).get()

    assert groups == {"admins": ["ann", "bob"], "users": ["carl", "dora"]}


def test_map_of_data_objects(make_binder):
    binder = make_binder({"servers": {"main": {"host": "a"}, "backup": {"host": "b", "port": "81"}}})

    servers = binder.bind("servers", Dict[str, Server]).get()

    assert servers == {"main": Server("a"), "backup": Server("b", 81)}


def test_untyped_map_binds_nested_maps(make_binder):
    binder = make_binder({"tree": {"a": {"b": "1", "c": {"d": "2"}}, "e": "3"}})

    tree = binder.bind("tree", Dict[str, Any]).get()

    assert tree == {"a": {"b": "1", "c": {"d": "2"}}, "e": "3"}


def test_first_source_wins_per_key(make_binder):
    binder = make_binder({"m": {"a": "1"}}, {"m": {"a": "2", "b": "3"}})

    assert binder.bind("m", Dict[str, int]).get() == {"a": 1, "b": 3}


def test_empty_mapping_binds_as_direct_value(make_binder):
    binder = make_binder({"m": {}})

    assert binder.bind("m", Dict[str, int]).get() == {}


def test_map_merges_into_existing_value(make_binder):
    binder = make_binder({"m": {"a": "1"}})
    existing = {"z": 0}

    result = binder.bind("m", Bindable.of(Dict[str, int]).with_existing_value(existing)).get()

    assert result is existing
    assert existing == {"z": 0, "a": 1}


# -------------------------------------------------------------------
# Collections
# -------------------------------------------------------------------


def test_comma_separated_value_is_split(make_binder):
    binder = make_binder({"names": "a, b ,c"})

    assert binder.bind("names", List[str]).get() == ["a", "b", "c"]


def test_single_scalar_becomes_one_element(make_binder):
    binder = make_binder({"ports": 8080})

    assert binder.bind("ports", List[int]).get() == [8080]


def test_empty_value_is_unbound(make_binder):
    binder = make_binder({"names": ""})

    assert not binder.bind("names", List[str]).is_bound()


def test_missing_first_index_is_unbound(make_binder):
    binder = make_binder({"names[1]": "b"})

    assert not binder.bind("names", List[str]).is_bound()


@pytest.mark.parametrize(
    "target, expected",
    [
        (Set[int], {1, 2}),
        (FrozenSet[int], frozenset({1, 2})),
        (Deque[int], collections.deque([1, 2, 2])),
        (Sequence[int], [1, 2, 2]),
    ],
)
def test_collection_kinds(make_binder, target, expected):
    binder = make_binder({"values": ["1", "2", "2"]})

    result = binder.bind("values", target).get()

    assert result == expected
    assert type(result) is type(expected)


def test_nested_collections(make_binder):
    binder = make_binder({"matrix": [["a", "b"], ["c"]]})

    assert binder.bind("matrix", List[List[str]]).get() == [["a", "b"], ["c"]]


def test_collection_extends_existing_value(make_binder):
    binder = make_binder({"names": ["y"]})
    existing = ["x"]

    result = binder.bind("names", Bindable.of(List[str]).with_existing_value(existing)).get()

    assert result is existing
    assert existing == ["x", "y"]


def test_elements_come_from_a_single_source(make_binder):
    binder = make_binder(
        {"servers": [{"host": "a"}]},
        {"servers": [{"host": "b", "port": "81"}, {"host": "c"}]},
    )

    assert binder.bind("servers", List[Server]).get() == [Server("a")]


def test_later_source_used_when_first_has_no_elements(make_binder):
    binder = make_binder({"other": "x"}, {"servers": [{"host": "b"}]})

    assert binder.bind("servers", List[Server]).get() == [Server("b")]


# -------------------------------------------------------------------
# Tuples
# -------------------------------------------------------------------


def test_variadic_tuple(make_binder):
    binder = make_binder({"ids": "1,2,3"})

    assert binder.bind("ids", Tuple[int, ...]).get() == (1, 2, 3)


def test_fixed_tuple_converts_per_position(make_binder):
    binder = make_binder({"pair": ["a", "1", "ignored"]})

    assert binder.bind("pair", Tuple[str, int]).get() == ("a", 1)


def test_fixed_tuple_from_direct_value(make_binder):
    binder = make_binder({"pair": "a,1,ignored"})

    assert binder.bind("pair", Tuple[str, int]).get() == ("a", 1)


def test_bare_tuple(make_binder):
    binder = make_binder({"values": ["x", "y"]})

    assert binder.bind("values", tuple).get() == ("x", "y")


# -------------------------------------------------------------------
# Recursive binding
# -------------------------------------------------------------------


ITERABLE_SOURCE = MapPropertySource({})
LOOKUP_SOURCE = LookupPropertySource({}.get)


@pytest.mark.parametrize(
    "binder_type, source, expected",
    [
        (MapBinder, None, True),
        (MapBinder, ITERABLE_SOURCE, True),
        (MapBinder, LOOKUP_SOURCE, True),
        (CollectionBinder, None, True),
        (CollectionBinder, ITERABLE_SOURCE, True),
        (CollectionBinder, LOOKUP_SOURCE, False),
        (ArrayBinder, None, True),
        (ArrayBinder, ITERABLE_SOURCE, True),
        (ArrayBinder, LOOKUP_SOURCE, False),
    ],
)
def test_allow_recursive_binding(binder_type, source, expected):
    context = BindContext(Binder(MapPropertySource({})))

    assert binder_type(context).is_allow_recursive_binding(source) is expected


def test_map_values_may_bind_the_enclosing_type(make_binder):
    binder = make_binder({"tree": {"name": "r", "children": {"a": {"name": "a"}}}})

    tree = binder.bind("tree", Tree).get()

    assert tree == Tree("r", {"a": Tree("a")})


def test_elements_from_lookup_sources_do_not_recurse():
    values = {"node.name": "root", "node.kids[0].name": "child"}
    binder = Binder(LookupPropertySource(values.get, "lookup"))

    node = binder.bind("node", LinkedNode).get()

    assert node == LinkedNode("root", [])
