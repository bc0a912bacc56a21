"""CLI entry point for api-doc-agent."""

import logging

import click

from api_doc_agent.config import Config, ConfigError, load_config
from api_doc_agent.loader import DocumentLoader, DocumentLoadError
from api_doc_agent.parser.base import SummaryModel
from api_doc_agent.parser.swagger import compute_metadata, search_endpoints


def _load_config() -> Config:
    try:
        return load_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def _load_document(config: Config, source: str | None) -> dict:
    """Load the document from --source, falling back to OPENAPI_JSON."""
    source = source or config.openapi_json
    if not source:
        raise click.ClickException("No OpenAPI document configured. Pass --source or set OPENAPI_JSON.")
    loader = DocumentLoader(source, timeout=config.request_timeout)
    try:
        return loader.get_document()
    except DocumentLoadError as e:
        raise click.ClickException(str(e)) from e


def _echo_json(model: SummaryModel) -> None:
    click.echo(model.to_json(indent=2))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """API Doc Agent: search OpenAPI documents and summarize their schemas."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("path_filter")
@click.option("--source", default=None, help="URL or file path of the OpenAPI document (default: $OPENAPI_JSON).")
@click.option("--max-depth", default=None, type=click.IntRange(min=0), help="Nested schema expansion limit.")
def search(path_filter: str, source: str | None, max_depth: int | None):
    """Find operations whose path contains PATH_FILTER (case-insensitive)."""
    config = _load_config()
    doc = _load_document(config, source)
    depth = config.max_schema_depth if max_depth is None else max_depth
    result = search_endpoints(doc, path_filter, max_depth=depth)
    _echo_json(result)


@main.command()
@click.option("--source", default=None, help="URL or file path of the OpenAPI document (default: $OPENAPI_JSON).")
def metadata(source: str | None):
    """Show the document title, operation count and tag count."""
    config = _load_config()
    doc = _load_document(config, source)
    _echo_json(compute_metadata(doc))
