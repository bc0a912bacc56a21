"""Combine partial schema summaries into one.

Contributions are folded left to right. Scalars are first-writer-wins, so
the caller's ordering decides which of two conflicting declarations
survives. Descriptions accumulate, properties union by name and item
schemas merge recursively.
"""

from .base import SchemaProperty, SchemaSummary

FIRST_WINS_FIELDS = ("type", "format", "title", "ref", "enum", "items_type", "items_enum")
DEFINED_VALUE_FIELDS = ("default", "example")


def merge_summaries(*summaries: SchemaSummary | None) -> SchemaSummary | None:
    """Merge summaries in order. Returns None if none of them defines anything."""
    present = [s for s in summaries if s is not None]
    if not present:
        return None

    merged: dict = {}
    for summary in present:
        for field in FIRST_WINS_FIELDS:
            value = getattr(summary, field)
            if field not in merged and value:
                merged[field] = list(value) if isinstance(value, list) else value

        # null is a real default/example, only an unset field is skipped
        for field in DEFINED_VALUE_FIELDS:
            if field not in merged and summary.defines(field):
                merged[field] = getattr(summary, field)

        if summary.description:
            merged["description"] = _append_description(
                merged.get("description"), summary.description
            )

        if summary.properties:
            merged["properties"] = merge_properties(
                merged.get("properties"), summary.properties
            )

        if summary.items_schema is not None:
            merged["items_schema"] = merge_summaries(
                merged.get("items_schema"), summary.items_schema
            )

    return SchemaSummary(**merged) if merged else None


def merge_properties(
    base: list[SchemaProperty] | None,
    incoming: list[SchemaProperty],
) -> list[SchemaProperty]:
    """Union two property lists by name, keeping first-seen order."""
    result = list(base or [])
    index = {prop.name: i for i, prop in enumerate(result)}

    for prop in incoming:
        position = index.get(prop.name)
        if position is None:
            index[prop.name] = len(result)
            result.append(prop)
            continue

        existing = result[position]
        result[position] = make_property(
            existing.name,
            existing.required or prop.required,
            existing.description or prop.description,
            merge_summaries(existing.schema_, prop.schema_),
        )

    return result


def make_property(
    name: str,
    required: bool,
    description: str | None = None,
    schema: SchemaSummary | None = None,
) -> SchemaProperty:
    """Build a property, leaving absent description/schema unset."""
    fields: dict = {"name": name, "required": required}
    if description:
        fields["description"] = description
    if schema is not None:
        fields["schema_"] = schema
    return SchemaProperty(**fields)


def _append_description(current: str | None, addition: str) -> str:
    if not current:
        return addition
    if addition in current:
        return current
    return f"{current}; {addition}"
