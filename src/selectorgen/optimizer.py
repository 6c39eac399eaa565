from __future__ import annotations

import logging
from typing import Sequence

from .deadline import Deadline
from .logs import get_logger, trace
from .models import Descriptor, GeneratorOptions, Path
from .oracle import UniquenessOracle


class PathOptimizer:
    def __init__(
        self,
        options: GeneratorOptions,
        oracle: UniquenessOracle,
        deadline: Deadline,
        logger: logging.Logger | None = None,
    ) -> None:
        self.options = options
        self.oracle = oracle
        self.deadline = deadline
        self.logger = logger or get_logger("generator")

    def optimize(self, path: Sequence[Descriptor]) -> Path:
        """Greedily drop the costliest descriptors while the path stays unique.

        Deletion is attempted in descending penalty order (wildcards and tags
        before classes and ids). A removal is kept only if the shorter path is
        still unique and still selects the target; the survivors are returned
        in ancestor-to-descendant order.
        """
        floor = self.options.optimized_min_length
        if len(path) <= floor:
            self._trace("Path length %s <= %s; skipping optimization", len(path), floor)
            return list(path)

        working = sorted(path, key=lambda descriptor: descriptor.penalty, reverse=True)
        index = 0
        while index < len(working) and len(working) > floor:
            self.deadline.check("optimize")

            removed = working[index]
            candidate = working[:index] + working[index + 1:]
            ordered = _by_level(candidate)
            if self.oracle.is_unique(ordered) and self.oracle.matches_target(ordered):
                self._trace("Dropped %s: %s", removed.text, self.oracle.render(ordered))
                working = candidate
            else:
                self._trace("Kept %s", removed.text)
                index += 1

        return _by_level(working)

    def _trace(self, message: str, *args: object) -> None:
        trace(self.logger, self.options.debug, message, *args)


def _by_level(path: Sequence[Descriptor]) -> Path:
    return sorted(path, key=lambda descriptor: descriptor.level if descriptor.level is not None else 0)
