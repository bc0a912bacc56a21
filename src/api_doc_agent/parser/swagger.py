"""OpenAPI / Swagger operation search.

Finds every path + method operation whose path template contains a filter
string and summarizes its parameters, request body and responses. Works on
an already-parsed OpenAPI 3.x or Swagger 2.0 document and never mutates it.
Malformed fragments are skipped rather than reported.
"""

import logging
import re
from typing import Any

from .base import (
    ContentSummary,
    DocumentMetadata,
    OperationMatch,
    ParameterSummary,
    RequestBodySummary,
    ResponseSummary,
    SchemaSummary,
    SearchResult,
)
from .merge import merge_summaries
from .refs import RefResolver, make_ref_resolver
from .schema import MAX_SCHEMA_DEPTH, summarize_schema

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "patch", "delete", "options", "head", "trace")

STATUS_PATTERN = re.compile(r"^[1-5][0-9]{2}$")

DEFAULT_PROJECT_TITLE = "Swagger Project"


class _Summarizer:
    """Per-document helpers sharing one ref resolver and depth limit."""

    def __init__(self, document: dict, max_depth: int = MAX_SCHEMA_DEPTH):
        self.resolve_ref: RefResolver = make_ref_resolver(document)
        self.max_depth = max_depth

    def schema(self, node: Any) -> SchemaSummary | None:
        return summarize_schema(node, self.resolve_ref, max_depth=self.max_depth)

    def with_ref(self, obj: dict) -> dict:
        """Resolve an object's own ``$ref`` as a base under its local keys."""
        ref = obj.get("$ref")
        if isinstance(ref, str):
            resolved = self.resolve_ref(ref)
            if isinstance(resolved, dict):
                return {**resolved, **obj}
        return obj


def match_operations(
    document: dict,
    path_filter: str,
    max_depth: int = MAX_SCHEMA_DEPTH,
) -> list[OperationMatch]:
    """Return an OperationMatch for each operation whose path contains the filter.

    Matching is a case-insensitive substring test on the raw path template.
    """
    needle = path_filter.strip().lower()
    if not needle:
        return []

    summarizer = _Summarizer(document, max_depth)
    matches = []

    for path, path_item in _paths(document).items():
        if not isinstance(path_item, dict):
            continue
        if needle not in str(path).lower():
            continue

        shared_params = path_item.get("parameters")
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            matches.append(
                _summarize_operation(summarizer, str(path), method, operation, shared_params)
            )

    logger.debug("Path filter %r matched %d operations", path_filter, len(matches))
    return matches


def compute_metadata(document: dict) -> DocumentMetadata:
    """Count declared operations and distinct tag names."""
    tags: set[str] = set()
    total_endpoints = 0

    for path_item in _paths(document).values():
        if not isinstance(path_item, dict):
            continue
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue
            total_endpoints += 1
            operation_tags = operation.get("tags")
            if isinstance(operation_tags, list):
                tags.update(_clean_tag(tag) for tag in operation_tags)

    doc_tags = document.get("tags")
    if isinstance(doc_tags, list):
        for tag in doc_tags:
            if isinstance(tag, dict):
                tag = tag.get("name")
            tags.add(_clean_tag(tag))

    tags.discard("")

    info = document.get("info")
    title = info.get("title") if isinstance(info, dict) else None
    project_title = title.strip() if isinstance(title, str) else ""

    return DocumentMetadata(
        project_title=project_title or DEFAULT_PROJECT_TITLE,
        total_endpoints=total_endpoints,
        total_tags=len(tags),
    )


def search_endpoints(
    document: dict,
    path_filter: str,
    max_depth: int = MAX_SCHEMA_DEPTH,
) -> SearchResult:
    """Run a path search and wrap it with document metadata."""
    matches = match_operations(document, path_filter, max_depth=max_depth)
    return SearchResult(
        query=path_filter,
        total_matches=len(matches),
        metadata=compute_metadata(document),
        matches=matches,
    )


def _paths(document: dict) -> dict:
    paths = document.get("paths")
    return paths if isinstance(paths, dict) else {}


def _clean_tag(tag: Any) -> str:
    return tag.strip() if isinstance(tag, str) else ""


def _summarize_operation(
    summarizer: _Summarizer,
    path: str,
    method: str,
    operation: dict,
    shared_params: Any,
) -> OperationMatch:
    fields: dict = {"path": path, "method": method.upper()}

    for key, field in (("summary", "summary"), ("description", "description"), ("operationId", "operation_id")):
        value = operation.get(key)
        if isinstance(value, str):
            fields[field] = value

    tags = operation.get("tags")
    if isinstance(tags, list) and all(isinstance(tag, str) for tag in tags):
        fields["tags"] = tags

    parameters = _parse_parameters(summarizer, shared_params, operation.get("parameters"))
    if parameters:
        fields["parameters"] = parameters

    request_body = _parse_request_body(summarizer, operation.get("requestBody"))
    if request_body is not None:
        fields["request_body"] = request_body

    success, errors = _parse_responses(summarizer, operation.get("responses"))
    if success:
        fields["success_responses"] = success
    if errors:
        fields["error_responses"] = errors

    return OperationMatch(**fields)


def _parse_parameters(
    summarizer: _Summarizer,
    shared_params: Any,
    operation_params: Any,
) -> list[ParameterSummary]:
    own = _parse_parameter_list(summarizer, operation_params)
    # operation-level parameters replace path-level ones with the same (name, in)
    overridden = {(p.name, p.location) for p in own}
    shared = [
        p for p in _parse_parameter_list(summarizer, shared_params)
        if (p.name, p.location) not in overridden
    ]
    return shared + own


def _parse_parameter_list(summarizer: _Summarizer, params: Any) -> list[ParameterSummary]:
    if not isinstance(params, list):
        return []
    result = []
    for param in params:
        summary = _parse_parameter(summarizer, param)
        if summary is not None:
            result.append(summary)
    return result


def _parse_parameter(summarizer: _Summarizer, param: Any) -> ParameterSummary | None:
    if not isinstance(param, dict):
        return None
    param = summarizer.with_ref(param)

    name = param.get("name")
    location = param.get("in")
    if not isinstance(name, str) or not name or not isinstance(location, str) or not location:
        return None

    fields: dict = {"name": name, "location": location}
    if isinstance(param.get("required"), bool):
        fields["required"] = param["required"]
    if isinstance(param.get("description"), str):
        fields["description"] = param["description"]

    # Swagger 2.0 declares type/enum/items on the parameter itself
    schema = merge_summaries(summarizer.schema(param.get("schema")), summarizer.schema(param))
    if schema is not None:
        fields["schema_"] = schema

    return ParameterSummary(**fields)


def _parse_request_body(summarizer: _Summarizer, body: Any) -> RequestBodySummary | None:
    if not isinstance(body, dict):
        return None
    body = summarizer.with_ref(body)

    content = body.get("content")
    content_types = [str(key) for key in content] if isinstance(content, dict) else []

    fields: dict = {
        "required": bool(body.get("required")),
        "content_types": content_types,
    }
    if isinstance(body.get("description"), str):
        fields["description"] = body["description"]

    contents = _parse_contents(summarizer, content)
    if contents:
        fields["contents"] = contents

    return RequestBodySummary(**fields)


def _parse_responses(
    summarizer: _Summarizer,
    responses: Any,
) -> tuple[list[ResponseSummary], list[ResponseSummary]]:
    """Split responses into (success, error) lists by status class."""
    success: list[ResponseSummary] = []
    errors: list[ResponseSummary] = []
    if not isinstance(responses, dict):
        return success, errors

    for status, response in responses.items():
        status = str(status)
        if not STATUS_PATTERN.match(status):
            continue
        if not isinstance(response, dict):
            continue
        response = summarizer.with_ref(response)

        fields: dict = {"status": status}
        if isinstance(response.get("description"), str):
            fields["description"] = response["description"]

        contents = _parse_contents(summarizer, response.get("content"))
        if contents:
            fields["content_types"] = [entry.content_type for entry in contents]
            fields["contents"] = contents

        code = int(status)
        if 200 <= code < 400:
            success.append(ResponseSummary(**fields))
        elif code >= 400:
            errors.append(ResponseSummary(**fields))

    return success, errors


def _parse_contents(summarizer: _Summarizer, content: Any) -> list[ContentSummary]:
    if not isinstance(content, dict):
        return []

    result = []
    for content_type, media in content.items():
        if not isinstance(media, dict):
            continue

        fields: dict = {"content_type": str(content_type)}
        schema = summarizer.schema(media.get("schema"))
        if schema is not None:
            fields["schema_"] = schema
        if "example" in media:
            fields["example"] = media["example"]
        examples = _parse_examples(media.get("examples"))
        if examples:
            fields["examples"] = examples

        result.append(ContentSummary(**fields))
    return result


def _parse_examples(examples: Any) -> dict | None:
    """Flatten an Examples map to {name: value}."""
    if not isinstance(examples, dict):
        return None
    parsed = {}
    for key, example in examples.items():
        if isinstance(example, dict) and "value" in example:
            parsed[str(key)] = example["value"]
        else:
            parsed[str(key)] = example
    return parsed or None
