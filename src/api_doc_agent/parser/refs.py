"""In-document ``$ref`` resolution.

Only local JSON pointers (``#/components/schemas/Pet``) are supported.
Anything else, including external files and URLs, is reported as not found.
"""

from typing import Any, Callable

REF_PREFIX = "#/"

RefResolver = Callable[[str], Any]


def resolve_ref(document: Any, ref: str) -> Any:
    """Return the node ``ref`` points at inside ``document``, or None."""
    if not isinstance(ref, str) or not ref.startswith(REF_PREFIX):
        return None

    current = document
    for segment in ref[len(REF_PREFIX):].split("/"):
        part = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, list):
            if not part.isdecimal():
                return None
            index = int(part)
            if index >= len(current):
                return None
            current = current[index]
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None

    return current


def make_ref_resolver(document: Any) -> RefResolver:
    """Bind ``resolve_ref`` to one document."""

    def resolver(ref: str) -> Any:
        return resolve_ref(document, ref)

    return resolver
