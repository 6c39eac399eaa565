from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from lxml import etree

from .deadline import Deadline
from .dom_utils import element_level
from .errors import UnresolvableSelectorError
from .logs import get_logger, trace
from .models import Descriptor, GeneratorOptions, Path
from .oracle import UniquenessOracle
from .providers import ProviderChain, wildcard


class BuildState(str, Enum):
    DESCENDING = "descending"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(slots=True)
class BuildResult:
    path: Path
    state: BuildState
    steps: int


class PathBuilder:
    """Walks from the target up to the scope, prepending one descriptor per level.

    The walk stops as soon as the accumulated path is unique (``FOUND``). When
    the scope has been included without an early exit the path is tested once
    more; a non-unique path at that point is a failure.
    """

    def __init__(
        self,
        options: GeneratorOptions,
        chain: ProviderChain,
        oracle: UniquenessOracle,
        deadline: Deadline,
        logger: logging.Logger | None = None,
    ) -> None:
        self.options = options
        self.chain = chain
        self.oracle = oracle
        self.deadline = deadline
        self.logger = logger or get_logger("generator")

    def build(self, target: etree._Element, scope: etree._Element) -> BuildResult:
        boundary = scope.getparent()
        target_level = element_level(target, scope)
        path: Path = []
        current: etree._Element | None = target
        depth = 0

        while current is not None and current is not boundary:
            self.deadline.check("build")

            if self.options.max_depth is not None and depth > self.options.max_depth:
                self._trace("Max depth of %s reached at <%s>", self.options.max_depth, current.tag)
                break

            descriptor = self._describe(current).at_level(target_level - depth)
            path.insert(0, descriptor)

            if len(path) >= self.options.seed_min_length and self.oracle.is_unique(path):
                self._trace("Unique path found: %s", self.oracle.render(path))
                return BuildResult(path=path, state=BuildState.FOUND, steps=depth + 1)

            current = current.getparent()
            depth += 1

        if self.oracle.is_unique(path):
            self._trace("Unique path found after traversal: %s", self.oracle.render(path))
            return BuildResult(path=path, state=BuildState.EXHAUSTED, steps=depth)

        locator = self.oracle.render(path)
        self._trace("Unable to find a unique path after full traversal: %s", locator)
        raise UnresolvableSelectorError("Unable to generate a unique selector.", selector=locator)

    def _describe(self, node: etree._Element) -> Descriptor:
        described = self.chain.describe(node)
        if described is None:
            self._trace("No provider matched <%s>; using wildcard", node.tag)
            return wildcard()
        kind, descriptor = described
        self._trace("Provider %s produced %s for <%s>", kind.value, descriptor.text, node.tag)
        return descriptor

    def _trace(self, message: str, *args: object) -> None:
        trace(self.logger, self.options.debug, message, *args)
