"""Recursive schema summarizer.

Turns one JSON Schema node (as found in OpenAPI parameters, request bodies
and responses) into a bounded ``SchemaSummary``. Each node is treated as a
set of independent contributions that get merged in a fixed order:

1. the node's own fields (including expanded ``items`` and ``properties``),
2. the summary of its ``$ref`` target, if the ref resolves,
3. the summaries of its ``allOf`` / ``oneOf`` / ``anyOf`` branches.

A local field therefore overrides the same field on the ref target, and
the ref target overrides combinator branches.

Recursion is bounded two ways. Nodes already on the current recursion path
are skipped (cycles), and nodes deeper than ``max_depth`` are reduced to a
leaf without further expansion. The seen-set is path-local, so a component
reused in several places of one tree is expanded at each of them.
"""

from typing import Any

from .base import EnumValue, SchemaSummary
from .merge import make_property, merge_summaries
from .refs import RefResolver

MAX_SCHEMA_DEPTH = 3

COMBINATOR_KEYS = ("allOf", "oneOf", "anyOf")
DIRECT_STRING_FIELDS = ("type", "format", "title", "description")


def summarize_schema(
    node: Any,
    resolve_ref: RefResolver | None = None,
    depth: int = 0,
    seen: set[int] | None = None,
    max_depth: int = MAX_SCHEMA_DEPTH,
) -> SchemaSummary | None:
    """Summarize ``node``. Returns None when it contributes nothing."""
    if not isinstance(node, dict):
        return None
    if seen is None:
        seen = set()
    if id(node) in seen:
        return None
    if depth > max_depth:
        return _summarize_leaf(node)

    seen.add(id(node))
    try:
        return _summarize_node(node, resolve_ref, depth, seen, max_depth)
    finally:
        seen.discard(id(node))


def sanitize_enum(value: Any) -> list[EnumValue] | None:
    """Keep only primitive enum members. None if nothing usable remains."""
    if not isinstance(value, list):
        return None
    sanitized = [v for v in value if isinstance(v, (str, int, float, bool))]
    return sanitized or None


def _summarize_node(
    node: dict,
    resolve_ref: RefResolver | None,
    depth: int,
    seen: set[int],
    max_depth: int,
) -> SchemaSummary | None:
    def recurse(child: Any) -> SchemaSummary | None:
        return summarize_schema(child, resolve_ref, depth + 1, seen, max_depth)

    direct = _direct_fields(node)
    ref = direct.get("ref")

    items = node.get("items")
    if items:
        item_summary = recurse(items)
        if item_summary is not None:
            direct["items_schema"] = item_summary
            if item_summary.type:
                direct["items_type"] = item_summary.type
            if item_summary.enum:
                direct["items_enum"] = list(item_summary.enum)
            direct.setdefault("type", "array")

    properties = node.get("properties")
    if isinstance(properties, dict):
        required = _required_names(node.get("required"))
        summarized = []
        for name, prop_schema in properties.items():
            prop_summary = recurse(prop_schema)
            description = _own_description(prop_schema)
            if description is None and prop_summary is not None:
                description = prop_summary.description
            summarized.append(
                make_property(str(name), name in required, description, prop_summary)
            )
        if summarized:
            direct["properties"] = summarized
            direct.setdefault("type", "object")

    branches: list[SchemaSummary] = []
    for key in COMBINATOR_KEYS:
        variants = node.get(key)
        if not isinstance(variants, list):
            continue
        for variant in variants:
            variant_summary = recurse(variant)
            if variant_summary is not None:
                branches.append(variant_summary)
        # variants are not disambiguated, only counted
        if key != "allOf" and len(variants) > 1:
            marker = f"{key} ({len(variants)} variants)"
            current = direct.get("description")
            direct["description"] = f"{current}; {marker}" if current else marker

    contributions: list[SchemaSummary] = []
    if direct:
        contributions.append(SchemaSummary(**direct))

    if ref and resolve_ref is not None:
        resolved = recurse(resolve_ref(ref))
        if resolved is not None:
            contributions.append(resolved)

    contributions.extend(branches)

    merged = merge_summaries(*contributions)
    if merged is not None and ref and not merged.ref:
        merged = merged.model_copy(update={"ref": ref})
    return merged


def _direct_fields(node: dict) -> dict:
    fields: dict = {}
    for key in DIRECT_STRING_FIELDS:
        value = node.get(key)
        if isinstance(value, str) and value:
            fields[key] = value

    ref = node.get("$ref")
    if isinstance(ref, str) and ref:
        fields["ref"] = ref

    enum = sanitize_enum(node.get("enum"))
    if enum:
        fields["enum"] = enum

    for key in ("default", "example"):
        if key in node:
            fields[key] = node[key]

    return fields


def _summarize_leaf(node: dict) -> SchemaSummary | None:
    """Depth-capped summary: the node's own type and ref, nothing nested."""
    leaf: dict = {}
    if isinstance(node.get("type"), str) and node["type"]:
        leaf["type"] = node["type"]
    if isinstance(node.get("$ref"), str) and node["$ref"]:
        leaf["ref"] = node["$ref"]
    return SchemaSummary(**leaf) if leaf else None


def _required_names(value: Any) -> set[str]:
    if not isinstance(value, list):
        return set()
    return {name for name in value if isinstance(name, str)}


def _own_description(prop_schema: Any) -> str | None:
    if isinstance(prop_schema, dict):
        description = prop_schema.get("description")
        if isinstance(description, str) and description:
            return description
    return None
