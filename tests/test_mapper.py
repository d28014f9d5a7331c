from trustgate.mapper import FieldMapper, FieldMapping, get_field_value, set_field_value


def test_no_mappings_returns_source_itself():
    source = {"a": 1}
    assert FieldMapper().map_fields(source) is source


def test_nested_mapping_to_new_destination():
    source = {"user": {"name": "ann", "age": 3}, "other": True}
    mapper = FieldMapper([FieldMapping("user.name", "person.first")])
    assert mapper.map_fields(source) == {"person": {"first": "ann"}}


def test_destination_defaults_to_source_path():
    source = {"a": {"b": "x"}}
    mapper = FieldMapper([FieldMapping("a.b")])
    assert mapper.map_fields(source) == source


def test_missing_values_are_skipped():
    mapper = FieldMapper([FieldMapping("missing"), FieldMapping("a.z")])
    assert mapper.map_fields({"a": {"b": 1}}) == {}


def test_get_through_non_mapping_is_none():
    assert get_field_value({"a": "str"}, "a.b") is None
    assert get_field_value({"a": {"b": [1]}}, "a.b") == [1]


def test_set_replaces_non_mapping_intermediate():
    data = {"a": 5}
    set_field_value(data, "a.b.c", "v")
    assert data == {"a": {"b": {"c": "v"}}}


def test_set_then_get_round_trip():
    data = {}
    set_field_value(data, "x.y", [1, 2])
    assert get_field_value(data, "x.y") == [1, 2]