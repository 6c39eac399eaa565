from __future__ import annotations

from typing import Sequence

from .models import Descriptor, Dialect

UNIVERSAL = {"css": "*", "xpath": "//*"}
DOCUMENT_ROOT_TOKEN = {"css": "html", "xpath": "/html"}

_CHILD_JOIN = {"css": " > ", "xpath": "/"}
_DESCENDANT_JOIN = {"css": " ", "xpath": "//"}


def render_path(path: Sequence[Descriptor], dialect: Dialect = "css") -> str:
    """Serialize an ancestor-to-descendant path.

    Each descriptor is attached to the one after it with the child combinator
    when it sits exactly one level above it, otherwise with the descendant
    combinator. Untagged levels always use the descendant combinator.
    """
    if not path:
        return UNIVERSAL[dialect]

    query = path[-1].text
    attached = path[-1]
    for descriptor in reversed(path[:-1]):
        if _is_parent_of(descriptor, attached):
            query = f"{descriptor.text}{_CHILD_JOIN[dialect]}{query}"
        else:
            query = f"{descriptor.text}{_DESCENDANT_JOIN[dialect]}{query}"
        attached = descriptor

    if dialect == "xpath":
        return f"//{query}"
    return query


def _is_parent_of(ancestor: Descriptor, descendant: Descriptor) -> bool:
    if ancestor.level is None or descendant.level is None:
        return False
    return ancestor.level == descendant.level - 1
