import pytest

from bspkit.keyvalues import KeyValueCollection, KeyValueEntry
from bspkit.vec import Vec3

SAMPLE = """
{
"classname" "worldspawn"
"message" "Test map"
}
{
"classname" "light"
"origin" "64 -128 32.5"
"light" "300"
}
{
"classname" "light"
"light" "12abc"
}
"""


@pytest.fixture
def collection():
    c = KeyValueCollection()
    c.init_from_string(SAMPLE)
    return c


def test_parses_all_blocks(collection):
    assert len(collection.entries) == 3
    assert collection.entries[0].properties == {
        "classname": "worldspawn",
        "message": "Test map",
    }


def test_all_with_key_value(collection):
    lights = collection.all_with_key_value("classname", "light")
    assert len(lights) == 2
    assert all(e.properties["classname"] == "light" for e in lights)
    assert collection.all_with_key_value("classname", "nothing") == []


def test_get_int_and_vec3(collection):
    light = collection.entries[1]
    assert light.get_int("light") == 300
    assert light.get_vec3("origin") == Vec3(64, -128, 32.5)


def test_get_int_uses_leading_digits(collection):
    assert collection.entries[2].get_int("light") == 12


def test_missing_key_returns_none(collection):
    entry = collection.entries[0]
    assert entry.get_int("light") is None
    assert entry.get_vec3("origin") is None


def test_non_numeric_int_is_zero():
    entry = KeyValueEntry({"n": "abc"})
    assert entry.get_int("n") == 0


def test_partial_vec3_fills_missing_with_zero():
    entry = KeyValueEntry({"v": "7 8"})
    assert entry.get_vec3("v") == Vec3(7, 8, 0)


def test_unterminated_block_is_ignored():
    c = KeyValueCollection()
    c.init_from_string('{ "a" "b" } { "c" "d"')
    assert [e.properties for e in c.entries] == [{"a": "b"}]


def test_incomplete_pair_is_dropped():
    c = KeyValueCollection()
    c.init_from_string('{ "a" "b" "dangling" }')
    assert c.entries[0].properties == {"a": "b"}


def test_format_output():
    entry = KeyValueEntry({"a": "b"})
    assert entry.format() == '{\n  a: "b"\n}\n'
    c = KeyValueCollection([entry, entry])
    assert c.format() == entry.format() * 2