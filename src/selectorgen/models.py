from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Literal

from lxml import etree

from .dom_utils import is_element
from .selector_rules import stable_class_name, stable_id_name, stable_test_attribute

Dialect = Literal["css", "xpath"]
DIALECTS: tuple[str, ...] = ("css", "xpath")

NamePredicate = Callable[[str], bool]
AttributePredicate = Callable[[str, str], bool]


def accept_all(_value: str) -> bool:
    return True


def reject_all_attributes(_name: str, _value: str) -> bool:
    return False


@dataclass(frozen=True, slots=True)
class Descriptor:
    """One renderable fragment of a locator.

    ``level`` is the depth below the search scope (scope itself is 0). It is
    ``None`` until the path builder tags the descriptor with its position.
    """

    text: str
    penalty: float
    level: int | None = None

    def at_level(self, level: int) -> Descriptor:
        return replace(self, level=level)


Path = list[Descriptor]


@dataclass(frozen=True, slots=True)
class GeneratorOptions:
    scope: etree._Element | None = None
    id_name: NamePredicate = accept_all
    class_name: NamePredicate = accept_all
    tag_name: NamePredicate = accept_all
    attr: AttributePredicate = reject_all_attributes
    seed_min_length: int = 1
    optimized_min_length: int = 2
    max_candidates: int = 1000
    max_combinations: int = 10000
    timeout_ms: int | None = None
    max_depth: int | None = None
    dialect: Dialect = "css"
    debug: bool = False

    def __post_init__(self) -> None:
        for name in ("id_name", "class_name", "tag_name", "attr"):
            if not callable(getattr(self, name)):
                raise ValueError(f"{name} must be callable")
        if self.seed_min_length < 0:
            raise ValueError("seed_min_length must be >= 0")
        if self.optimized_min_length < 0:
            raise ValueError("optimized_min_length must be >= 0")
        if self.max_candidates < 1 or self.max_combinations < 1:
            raise ValueError("max_candidates and max_combinations must be >= 1")
        if self.timeout_ms is not None and self.timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.dialect not in DIALECTS:
            raise ValueError(f"Unknown dialect: {self.dialect!r}")
        if self.scope is not None and not is_element(self.scope):
            raise ValueError("scope must be an element")

    def with_overrides(self, **changes: Any) -> GeneratorOptions:
        if not changes:
            return self
        return replace(self, **changes)

    @classmethod
    def stable(cls, **overrides: Any) -> GeneratorOptions:
        """Options that skip generated ids and classes and use test attributes."""
        base: dict[str, Any] = {
            "id_name": stable_id_name,
            "class_name": stable_class_name,
            "attr": stable_test_attribute,
        }
        base.update(overrides)
        return cls(**base)
