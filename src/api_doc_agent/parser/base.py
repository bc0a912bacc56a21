"""Summary models produced from OpenAPI / Swagger documents.

Every model is a derived, read-only value computed fresh per search.
Attribute names are snake_case; the serialized form uses the camelCase
names downstream formatters and tool callers expect.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EnumValue = str | int | float | bool

# wire names, unset fields left out
_DUMP_OPTIONS = {"by_alias": True, "exclude_unset": True}


class SummaryModel(BaseModel):
    """Base for all summaries: camelCase aliases, frozen after construction."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict:
        """Serialize with wire names, leaving out fields that were never set."""
        return self.model_dump(mode="json", **_DUMP_OPTIONS)

    def to_json(self, indent: int | None = None) -> str:
        """JSON form of ``to_dict``."""
        return self.model_dump_json(indent=indent, **_DUMP_OPTIONS)


class SchemaProperty(SummaryModel):
    """One named property of an object schema."""

    name: str
    required: bool = False
    description: str | None = None
    schema_: "SchemaSummary | None" = Field(default=None, alias="schema")


class SchemaSummary(SummaryModel):
    """Bounded, merged reduction of a single schema node.

    Only explicitly set fields count as defined. ``default`` and ``example``
    may legitimately be ``None`` when the schema declares them as null, so
    callers check ``model_fields_set`` rather than the value.
    """

    type: str | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None
    enum: list[EnumValue] | None = None
    items_type: str | None = None
    items_enum: list[EnumValue] | None = None
    items_schema: "SchemaSummary | None" = None
    properties: list[SchemaProperty] | None = None
    default: Any = None
    example: Any = None
    ref: str | None = None

    def defines(self, field: str) -> bool:
        return field in self.model_fields_set

    def property_names(self) -> list[str]:
        return [p.name for p in self.properties or []]

    def get_property(self, name: str) -> SchemaProperty | None:
        for prop in self.properties or []:
            if prop.name == name:
                return prop
        return None


SchemaProperty.model_rebuild()


class ParameterSummary(SummaryModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str
    location: str = Field(alias="in")  # query / path / header / cookie
    required: bool | None = None
    description: str | None = None
    schema_: SchemaSummary | None = Field(default=None, alias="schema")


class ContentSummary(SummaryModel):
    """One media type entry of a request body or response."""

    content_type: str
    schema_: SchemaSummary | None = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Any] | None = None


class RequestBodySummary(SummaryModel):
    required: bool = False
    content_types: list[str] = []
    description: str | None = None
    contents: list[ContentSummary] | None = None


class ResponseSummary(SummaryModel):
    status: str  # "200", "404", ...
    description: str | None = None
    content_types: list[str] | None = None
    contents: list[ContentSummary] | None = None


class OperationMatch(SummaryModel):
    """A single path + method operation that matched a search filter."""

    path: str  # /pets/{petId}
    method: str  # GET / POST / ...
    summary: str | None = None
    description: str | None = None
    operation_id: str | None = None
    tags: list[str] | None = None
    parameters: list[ParameterSummary] | None = None
    request_body: RequestBodySummary | None = None
    success_responses: list[ResponseSummary] | None = None
    error_responses: list[ResponseSummary] | None = None


class DocumentMetadata(SummaryModel):
    project_title: str
    total_endpoints: int
    total_tags: int


class SearchResult(SummaryModel):
    """Envelope returned to tool-layer callers for one path search."""

    query: str
    total_matches: int
    metadata: DocumentMetadata
    matches: list[OperationMatch]
