import pytest
from pydantic import ValidationError

from confbind import (
    ConfigurationProperty,
    EnvironmentPropertySource,
    IterablePropertySource,
    LookupPropertySource,
    MapPropertySource,
    PropertyName,
    PropertyState,
)


def name(text):
    return PropertyName.of(text)


# -------------------------------------------------------------------
# ConfigurationProperty
# -------------------------------------------------------------------


def test_configuration_property_is_immutable():
    prop = ConfigurationProperty(name=name("a"), value="1", origin="test")

    assert str(prop) == "a='1' (test)"
    with pytest.raises(ValidationError):
        prop.value = "2"


def test_configuration_properties_sort_by_name():
    props = [ConfigurationProperty(name=name(n), value=n) for n in ("b", "a")]

    assert [p.value for p in sorted(props)] == ["a", "b"]


# -------------------------------------------------------------------
# MapPropertySource
# -------------------------------------------------------------------


def test_map_source_flattens_nested_data():
    source = MapPropertySource({"server": {"port": 80, "hosts": ["a", "b"]}, "debug": True}, "app")

    assert sorted(str(n) for n in source) == ["debug", "server.hosts[0]", "server.hosts[1]", "server.port"]
    assert source.get_property(name("server.hosts[1]")).value == "b"
    assert source.get_property(name("server.port")).value == 80
    assert len(source) == 4


def test_map_source_accepts_dotted_keys():
    source = MapPropertySource({"server.port": "80", "server.ssl.enabled": "true"})

    assert source.get_property(name("server.port")).value == "80"
    assert source.get_property(name("server.ssl.enabled")).value == "true"


def test_map_source_origin():
    prop = MapPropertySource({"a": {"b": 1}}, "app.yaml").get_property(name("a.b"))

    assert prop.origin == '"a.b" from property source "app.yaml"'
    assert prop.name == name("a.b")


def test_map_source_keeps_invalid_keys_bracketed():
    source = MapPropertySource({"map": {"a/b": "1"}})

    assert source.get_property(name("map[a/b]")).value == "1"


def test_map_source_keeps_empty_containers_as_values():
    source = MapPropertySource({"list": [], "map": {}})

    assert source.get_property(name("list")).value == []
    assert source.get_property(name("map")).value == {}


def test_map_source_descendants():
    source = MapPropertySource({"a": {"b": {"c": "1"}}})

    assert source.contains_descendant_of(name("a")) is PropertyState.PRESENT
    assert source.contains_descendant_of(name("a.b")) is PropertyState.PRESENT
    assert source.contains_descendant_of(name("a.b.c")) is PropertyState.ABSENT
    assert source.contains_descendant_of(name("x")) is PropertyState.ABSENT
    assert source.contains_descendant_of(PropertyName.EMPTY) is PropertyState.PRESENT


def test_names_under():
    source = MapPropertySource({"a": {"b": "1", "c": "2"}, "ab": "3"})

    assert [str(n) for n in source.names_under(name("a"))] == ["a.b", "a.c"]


def test_later_duplicate_replaces_earlier():
    source = MapPropertySource({"a.b": "dotted", "a": {"b": "nested"}})

    assert source.get_property(name("a.b")).value == "nested"
    assert len(source) == 1


# -------------------------------------------------------------------
# EnvironmentPropertySource
# -------------------------------------------------------------------


def test_environment_variable_names_are_mapped():
    source = EnvironmentPropertySource({"SERVER_PORT": "80", "HOSTS_0_NAME": "a", "SERVER_MAX-SIZE": "9"})

    assert source.get_property(name("server.port")).value == "80"
    assert source.get_property(name("hosts[0].name")).value == "a"
    assert source.get_property(name("server.maxsize")).value == "9"
    assert source.get_property(name("server.port")).origin == 'System Environment Property "SERVER_PORT"'


def test_environment_skips_unmappable_variables():
    source = EnvironmentPropertySource({"_PRIVATE": "x", "A__B": "y", "BAD$NAME": "z", "OK": "1"})

    assert [str(n) for n in source] == ["ok"]


def test_environment_prefix():
    source = EnvironmentPropertySource({"APP_DEBUG": "true", "OTHER_DEBUG": "false"}, prefix="app")

    assert [str(n) for n in source] == ["debug"]
    assert source.to_property_name("APP_SERVER_PORT") == name("server.port")
    assert source.to_property_name("SERVER_PORT") is None


def test_environment_is_copied(monkeypatch):
    monkeypatch.setenv("CONFBIND_TEST_VALUE", "1")
    source = EnvironmentPropertySource()
    monkeypatch.setenv("CONFBIND_TEST_VALUE", "2")

    assert source.get_property(name("confbind.test.value")).value == "1"


def test_environment_source_is_iterable():
    assert isinstance(EnvironmentPropertySource({}), IterablePropertySource)


# -------------------------------------------------------------------
# LookupPropertySource
# -------------------------------------------------------------------


def test_lookup_source():
    values = {"a.b": "1", "list[0]": "x"}
    source = LookupPropertySource(values.get, "vault")

    assert source.get_property(name("a.b")).value == "1"
    assert source.get_property(name("list[0]")).value == "x"
    assert source.get_property(name("missing")) is None
    assert source.get_property(PropertyName.EMPTY) is None
    assert source.contains_descendant_of(name("a")) is PropertyState.UNKNOWN
    assert not isinstance(source, IterablePropertySource)
    assert repr(source) == "LookupPropertySource('vault')"
