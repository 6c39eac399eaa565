from __future__ import annotations

from typing import Sequence

from lxml import etree
from lxml.cssselect import CSSSelector

from .dom_utils import is_within
from .models import Descriptor, Dialect
from .rendering import render_path


def query_scope(scope: etree._Element, locator: str, dialect: Dialect = "css") -> list[etree._Element]:
    """Evaluate a rendered locator and keep the matches inside ``scope``.

    CSS is evaluated relative to the scope (scope and descendants). XPath
    locators are document-absolute, so their matches are filtered to the scope.
    """
    if dialect == "xpath":
        found = etree.XPath(locator)(scope)
        return [node for node in found if isinstance(node, etree._Element) and is_within(node, scope)]
    return list(CSSSelector(locator)(scope))


class UniquenessOracle:
    """Answers "does this path select exactly the target?" for one generate call.

    Results are memoized by rendered locator. The memo is only valid for the
    target and tree snapshot it was created with, so callers build a new oracle
    per call and drop it afterwards.
    """

    def __init__(self, scope: etree._Element, target: etree._Element, dialect: Dialect = "css") -> None:
        self.scope = scope
        self.target = target
        self.dialect = dialect
        self._cache: dict[str, bool] = {}
        self.queries = 0
        self.cache_hits = 0

    def render(self, path: Sequence[Descriptor]) -> str:
        return render_path(path, self.dialect)

    def is_unique(self, path: Sequence[Descriptor]) -> bool:
        locator = self.render(path)
        cached = self._cache.get(locator)
        if cached is not None:
            self.cache_hits += 1
            return cached

        matches = self._query(locator)
        unique = len(matches) == 1 and matches[0] is self.target
        self._cache[locator] = unique
        return unique

    def matches_target(self, path: Sequence[Descriptor]) -> bool:
        return any(node is self.target for node in self._query(self.render(path)))

    def _query(self, locator: str) -> list[etree._Element]:
        self.queries += 1
        return query_scope(self.scope, locator, self.dialect)
