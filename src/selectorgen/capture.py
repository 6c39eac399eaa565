from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lxml import etree, html

from .dom_utils import resolve_child_index_path
from .errors import InvalidInputError
from .generator import SelectorGenerator
from .logs import get_logger
from .models import Dialect, GeneratorOptions

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

logger = get_logger("capture")

_CHILD_INDEX_PATH_SCRIPT = """
(el) => {
  const steps = [];
  let current = el;
  while (current && current.parentElement) {
    let index = 0;
    let sibling = current;
    while ((sibling = sibling.previousElementSibling)) {
      index += 1;
    }
    steps.unshift(index);
    current = current.parentElement;
  }
  return steps;
}
"""


@dataclass(frozen=True, slots=True)
class CapturedSelector:
    selector: str
    dialect: Dialect
    live_match_count: int

    @property
    def unique_on_page(self) -> bool:
        return self.live_match_count == 1


def snapshot_page(page: Page) -> etree._Element:
    return html.document_fromstring(page.content())


def locate_in_snapshot(root: etree._Element, element: ElementHandle) -> etree._Element:
    steps = element.evaluate(_CHILD_INDEX_PATH_SCRIPT)
    node = resolve_child_index_path(root, [int(step) for step in steps or []])
    if node is None:
        raise InvalidInputError("Element could not be located in the page snapshot.")
    return node


def count_live_matches(page: Page, selector: str, dialect: Dialect) -> int:
    if dialect == "xpath":
        return page.locator(f"xpath={selector}").count()
    return len(page.query_selector_all(selector))


def generate_for_handle(
    page: Page,
    element: ElementHandle,
    options: GeneratorOptions | None = None,
    **overrides: Any,
) -> CapturedSelector:
    """Generate a locator for a live element and re-count it on the page.

    The locator is synthesized on an lxml snapshot of the page, so ``scope`` is
    always the snapshot root; a scope passed in ``options`` is ignored. A live
    count other than 1 usually means the browser DOM and the parsed snapshot
    disagree; it is reported, not raised.
    """
    root = snapshot_page(page)
    target = locate_in_snapshot(root, element)
    generator = SelectorGenerator(options, **{**overrides, "scope": None})
    selector = generator.generate(target)
    dialect = generator.options.dialect
    live_count = count_live_matches(page, selector, dialect)
    if live_count != 1:
        logger.warning("Selector %s matched %s elements on the live page", selector, live_count)
    return CapturedSelector(selector=selector, dialect=dialect, live_match_count=live_count)
