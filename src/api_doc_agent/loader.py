"""Load an OpenAPI document once and keep it for the loader's lifetime.

Sources are either http(s) URLs or local file paths. Both JSON and YAML
documents are accepted.
"""

import json
import logging
import re
from pathlib import Path

import httpx
import yaml

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_HTTP_SOURCE = re.compile(r"^https?://", re.IGNORECASE)


class DocumentLoadError(RuntimeError):
    """The document could not be fetched, read, or parsed."""


def is_http_source(source: str) -> bool:
    return bool(_HTTP_SOURCE.match(source))


def parse_document(text: str, source: str) -> dict:
    """Parse JSON (or YAML) text into a document mapping."""
    try:
        doc = json.loads(text)
    except ValueError:
        try:
            doc = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DocumentLoadError(f"Failed to parse OpenAPI document at {source}: {e}") from e

    if not isinstance(doc, dict):
        raise DocumentLoadError(
            f"Failed to parse OpenAPI document at {source}: top-level value is not an object"
        )
    return doc


class DocumentLoader:
    """Fetches one configured document source and caches the parsed result.

    No lock is held: concurrent first calls may each fetch, and whichever
    finishes last populates the cache. Fetching has no side effects, so
    that only costs a duplicate request.
    """

    def __init__(self, source: str, timeout: float = DEFAULT_TIMEOUT):
        self.source = source
        self.timeout = timeout
        self._cache: dict | None = None

    def get_document(self) -> dict:
        if self._cache is not None:
            logger.debug("Using cached OpenAPI document for %s", self.source)
            return self._cache

        if is_http_source(self.source):
            doc = self._fetch()
        else:
            doc = self._read()

        self._cache = doc
        return doc

    def invalidate(self) -> None:
        self._cache = None

    def _fetch(self) -> dict:
        logger.info("Fetching OpenAPI document from %s", self.source)
        try:
            response = httpx.get(self.source, timeout=self.timeout, follow_redirects=True)
        except httpx.HTTPError as e:
            raise DocumentLoadError(f"Failed to fetch OpenAPI document from {self.source}: {e}") from e

        if not response.is_success:
            raise DocumentLoadError(
                f"Failed to fetch OpenAPI document from {self.source} (HTTP {response.status_code})"
            )
        return parse_document(response.text, self.source)

    def _read(self) -> dict:
        path = Path(self.source)
        if not path.is_absolute():
            path = Path.cwd() / path

        logger.info("Reading OpenAPI document from %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentLoadError(f"Failed to read OpenAPI document at {path}: {e}") from e
        return parse_document(text, str(path))
