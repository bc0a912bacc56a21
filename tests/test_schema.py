from pathlib import Path
from unittest.mock import patch

import yaml

from api_doc_agent.parser import schema
from api_doc_agent.parser.refs import make_ref_resolver
from api_doc_agent.parser.schema import MAX_SCHEMA_DEPTH, sanitize_enum, summarize_schema

FIXTURES = Path(__file__).parent / "fixtures"

PET_DOC = {
    "components": {
        "schemas": {
            "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
            "Owner": {"type": "object", "description": "Owner record"},
            "Code": {"type": "string", "description": "Status code"},
        },
    },
}

CYCLIC_DOC = {
    "components": {
        "schemas": {
            "Node": {
                "type": "object",
                "properties": {
                    "value": {"type": "string"},
                    "child": {"$ref": "#/components/schemas/Node"},
                },
            },
        },
    },
}


def _nested_properties(levels: int) -> dict:
    node = {"type": "string"}
    for _ in range(levels):
        node = {"type": "object", "properties": {"child": node}}
    return node


def _nested_items(levels: int) -> dict:
    node = {"type": "string"}
    for _ in range(levels):
        node = {"type": "array", "items": node}
    return node


class TestBasics:
    def test_non_object_is_absent(self):
        assert summarize_schema(None) is None
        assert summarize_schema("string") is None
        assert summarize_schema([{"type": "string"}]) is None

    def test_empty_object_is_absent(self):
        assert summarize_schema({}) is None

    def test_direct_fields(self):
        result = summarize_schema({
            "type": "string",
            "format": "date-time",
            "title": "Created",
            "description": "Creation time",
            "default": "now",
            "example": "2024-01-01T00:00:00Z",
        })
        assert result.type == "string"
        assert result.format == "date-time"
        assert result.title == "Created"
        assert result.description == "Creation time"
        assert result.default == "now"
        assert result.example == "2024-01-01T00:00:00Z"

    def test_null_example_is_kept(self):
        result = summarize_schema({"type": "string", "example": None})
        assert result.defines("example")
        assert result.to_dict() == {"type": "string", "example": None}

    def test_enum_is_sanitized(self):
        result = summarize_schema({"enum": ["a", 1, True, None, {"x": 1}, [1]]})
        assert result.enum == ["a", 1, True]

    def test_enum_without_primitives_dropped(self):
        assert sanitize_enum([None, {}]) is None
        assert sanitize_enum("a,b") is None
        assert summarize_schema({"type": "string", "enum": [None]}).enum is None


class TestItems:
    def test_items_fold_into_parent(self):
        result = summarize_schema({"items": {"type": "string", "enum": ["a", "b"]}})
        assert result.type == "array"
        assert result.items_type == "string"
        assert result.items_enum == ["a", "b"]
        assert result.items_schema.type == "string"

    def test_explicit_type_not_overridden(self):
        result = summarize_schema({"type": "set", "items": {"type": "integer"}})
        assert result.type == "set"


class TestProperties:
    def test_required_membership(self):
        result = summarize_schema({
            "required": ["id", 42],
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
            },
        })
        assert result.type == "object"
        assert result.property_names() == ["id", "name"]
        assert result.get_property("id").required is True
        assert result.get_property("name").required is False

    def test_inline_description_preferred(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({
            "properties": {
                "owner": {"$ref": "#/components/schemas/Owner", "description": "The owner"},
                "coOwner": {"$ref": "#/components/schemas/Owner"},
            },
        }, resolver)
        assert result.get_property("owner").description == "The owner"
        assert result.get_property("coOwner").description == "Owner record"

    def test_property_with_unusable_schema_kept_by_name(self):
        result = summarize_schema({"properties": {"blob": True}})
        prop = result.get_property("blob")
        assert prop is not None
        assert prop.schema_ is None


class TestRefs:
    def test_ref_round_trip(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({"$ref": "#/components/schemas/Pet"}, resolver)
        assert result.type == "object"
        assert result.ref == "#/components/schemas/Pet"
        assert len(result.properties) == 1
        assert result.properties[0].name == "name"
        assert result.properties[0].schema_.type == "string"

    def test_local_fields_override_ref_target(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({"$ref": "#/components/schemas/Code", "type": "integer"}, resolver)
        assert result.type == "integer"
        assert result.description == "Status code"

    def test_ref_target_overrides_combinator_branches(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({
            "$ref": "#/components/schemas/Code",
            "allOf": [{"type": "number", "format": "double"}],
        }, resolver)
        assert result.type == "string"
        assert result.format == "double"

    def test_unresolvable_ref_keeps_pointer(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({"$ref": "#/components/schemas/Missing"}, resolver)
        assert result.to_dict() == {"ref": "#/components/schemas/Missing"}

    def test_external_ref_keeps_pointer(self):
        resolver = make_ref_resolver(PET_DOC)
        result = summarize_schema({"$ref": "common.json#/Pet"}, resolver)
        assert result.ref == "common.json#/Pet"
        assert result.type is None

    def test_without_resolver(self):
        result = summarize_schema({"$ref": "#/components/schemas/Pet"})
        assert result.to_dict() == {"ref": "#/components/schemas/Pet"}

    def test_reused_component_expanded_in_each_position(self):
        doc = {
            "components": {
                "schemas": {
                    "Point": {"type": "object", "properties": {"x": {"type": "number"}}},
                },
            },
        }
        result = summarize_schema({
            "properties": {
                "start": {"$ref": "#/components/schemas/Point"},
                "end": {"$ref": "#/components/schemas/Point"},
            },
        }, make_ref_resolver(doc))
        for name in ("start", "end"):
            point = result.get_property(name).schema_
            assert point.property_names() == ["x"]
            assert point.get_property("x").schema_.type == "number"


class TestCombinators:
    def test_one_of_marker(self):
        result = summarize_schema({
            "oneOf": [{"type": "string"}, {"type": "integer"}, {"type": "boolean"}],
        })
        assert "oneOf (3 variants)" in result.description

    def test_any_of_marker_appended_to_description(self):
        result = summarize_schema({
            "description": "Identifier",
            "anyOf": [{"type": "string"}, {"type": "integer"}],
        })
        assert result.description == "Identifier; anyOf (2 variants)"
        assert result.type == "string"

    def test_single_variant_has_no_marker(self):
        result = summarize_schema({"oneOf": [{"type": "string"}]})
        assert result.description is None
        assert result.type == "string"

    def test_all_of_merges_without_marker(self):
        result = summarize_schema({
            "allOf": [
                {"type": "object", "properties": {"a": {"type": "string"}}},
                {"properties": {"b": {"type": "integer"}}, "required": ["b"]},
            ],
        })
        assert result.description is None
        assert result.type == "object"
        assert result.property_names() == ["a", "b"]
        assert result.get_property("b").required is True

    def test_all_of_with_refs_from_fixture(self):
        doc = yaml.safe_load((FIXTURES / "petstore.yaml").read_text(encoding="utf-8"))
        result = summarize_schema({"$ref": "#/components/schemas/Order"}, make_ref_resolver(doc))
        assert result.ref == "#/components/schemas/Order"
        assert result.type == "object"
        assert result.description == "A store order"
        assert result.property_names() == ["id", "payment"]
        assert result.get_property("id").required is True
        payment = result.get_property("payment").schema_
        assert "oneOf (2 variants)" in payment.description


class TestCycles:
    def test_self_referencing_component_terminates(self):
        resolver = make_ref_resolver(CYCLIC_DOC)
        result = summarize_schema({"$ref": "#/components/schemas/Node"}, resolver)
        assert result.type == "object"
        assert result.property_names() == ["value", "child"]
        child = result.get_property("child").schema_
        assert child.ref == "#/components/schemas/Node"
        assert child.properties is None

    def test_recursive_calls_are_bounded(self):
        resolver = make_ref_resolver(CYCLIC_DOC)
        with patch(
            "api_doc_agent.parser.schema.summarize_schema",
            wraps=schema.summarize_schema,
        ) as spy:
            result = spy({"$ref": "#/components/schemas/Node"}, resolver)
        assert result is not None
        assert spy.call_count < 20

    def test_object_containing_itself(self):
        node = {"type": "object", "properties": {}}
        node["properties"]["self"] = node
        result = summarize_schema(node)
        assert result.type == "object"
        assert result.get_property("self").schema_ is None

    def test_mutual_references(self):
        doc = {
            "components": {
                "schemas": {
                    "A": {"properties": {"b": {"$ref": "#/components/schemas/B"}}},
                    "B": {"type": "array", "items": {"$ref": "#/components/schemas/A"}},
                },
            },
        }
        result = summarize_schema({"$ref": "#/components/schemas/A"}, make_ref_resolver(doc))
        assert result.type == "object"
        assert result.get_property("b").schema_.type == "array"


class TestDepthBound:
    def _properties_levels(self, summary):
        """Number of levels below the root that still carry properties."""
        levels = -1
        current = summary
        while current is not None and current.properties:
            levels += 1
            current = current.get_property("child").schema_
        return levels

    def _items_levels(self, summary):
        levels = -1
        current = summary
        while current is not None and current.items_schema is not None:
            levels += 1
            current = current.items_schema
        return levels

    def test_deep_properties_are_capped(self):
        result = summarize_schema(_nested_properties(10))
        assert self._properties_levels(result) == MAX_SCHEMA_DEPTH

    def test_capped_node_is_a_leaf_with_type(self):
        result = summarize_schema(_nested_properties(10))
        current = result
        for _ in range(MAX_SCHEMA_DEPTH + 1):
            current = current.get_property("child").schema_
        assert current.to_dict() == {"type": "object"}

    def test_deep_items_are_capped(self):
        result = summarize_schema(_nested_items(10))
        assert self._items_levels(result) == MAX_SCHEMA_DEPTH

    def test_custom_max_depth(self):
        result = summarize_schema(_nested_properties(10), max_depth=1)
        assert self._properties_levels(result) == 1

    def test_shallow_schema_fully_expanded(self):
        result = summarize_schema(_nested_properties(2))
        leaf = result.get_property("child").schema_.get_property("child").schema_
        assert leaf.type == "string"
