from __future__ import annotations

import logging
import time
from typing import Any

from lxml import etree

from .deadline import Clock, Deadline
from .dom_utils import is_document_root, is_element, is_within, tree_root
from .errors import InvalidInputError
from .logs import get_logger, trace
from .models import GeneratorOptions
from .optimizer import PathOptimizer
from .oracle import UniquenessOracle
from .path_builder import PathBuilder
from .providers import ProviderChain
from .rendering import DOCUMENT_ROOT_TOKEN, render_path


class SelectorGenerator:
    """Synthesizes a short locator that selects exactly one element.

    Options and the provider chain are fixed per instance. Everything that
    depends on the target or the current tree (oracle cache, deadline) lives
    only for the duration of one ``generate`` call, so an instance can be
    reused across targets and across tree mutations between calls.
    """

    def __init__(
        self,
        options: GeneratorOptions | None = None,
        *,
        clock: Clock = time.monotonic,
        logger: logging.Logger | None = None,
        **overrides: Any,
    ) -> None:
        self.options = (options or GeneratorOptions()).with_overrides(**overrides)
        self.chain = ProviderChain.default(self.options)
        self.clock = clock
        self.logger = logger or get_logger("generator")

    def generate(self, target: Any) -> str:
        if not is_element(target):
            self._trace("Invalid node: %r", target)
            raise InvalidInputError("Cannot generate selector for non-element nodes.")

        dialect = self.options.dialect
        if is_document_root(target):
            self._trace("Element is <%s>; returning document root token", target.tag)
            return DOCUMENT_ROOT_TOKEN[dialect]

        scope = self._resolve_scope(target)
        deadline = Deadline.start(self.options.timeout_ms, clock=self.clock)
        oracle = UniquenessOracle(scope, target, dialect)
        self._trace("Starting selector generation for <%s>", target.tag)

        seed = PathBuilder(self.options, self.chain, oracle, deadline, self.logger).build(target, scope)
        self._trace("Seed path (%s): %s", seed.state.value, [item.text for item in seed.path])

        optimized = PathOptimizer(self.options, oracle, deadline, self.logger).optimize(seed.path)
        selector = render_path(optimized, dialect)
        self._trace(
            "Generated selector %s (%s queries, %s cache hits)",
            selector,
            oracle.queries,
            oracle.cache_hits,
        )
        return selector

    def _resolve_scope(self, target: etree._Element) -> etree._Element:
        scope = self.options.scope if self.options.scope is not None else tree_root(target)
        if not is_within(target, scope):
            raise InvalidInputError("Target element is outside of the search scope.")
        return scope

    def _trace(self, message: str, *args: object) -> None:
        trace(self.logger, self.options.debug, message, *args)


def generate_selector(target: Any, options: GeneratorOptions | None = None, **overrides: Any) -> str:
    return SelectorGenerator(options, **overrides).generate(target)
