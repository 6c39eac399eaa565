from __future__ import annotations

from typing import Any

from lxml import etree

DOCUMENT_ROOT_TAG = "html"


def is_element(node: Any) -> bool:
    # Comments and processing instructions are _Element subclasses with a non-string tag.
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def is_document_root(node: etree._Element) -> bool:
    return node.tag.lower() == DOCUMENT_ROOT_TAG


def tree_root(node: etree._Element) -> etree._Element:
    return node.getroottree().getroot()


def is_within(node: etree._Element, scope: etree._Element) -> bool:
    current: etree._Element | None = node
    while current is not None:
        if current is scope:
            return True
        current = current.getparent()
    return False


def element_index(node: etree._Element) -> int | None:
    """1-based position among element siblings, as used by ``:nth-child``."""
    if node.getparent() is None:
        return None
    index = 1
    for sibling in node.itersiblings(preceding=True):
        if is_element(sibling):
            index += 1
    return index


def element_level(node: etree._Element, scope: etree._Element) -> int:
    level = 0
    current = node
    while current is not scope:
        parent = current.getparent()
        if parent is None:
            break
        level += 1
        current = parent
    return level


def class_tokens(node: etree._Element) -> list[str]:
    return (node.get("class") or "").split()


def child_index_path(node: etree._Element) -> list[int]:
    """0-based element child indexes leading from the tree root down to ``node``."""
    steps: list[int] = []
    current = node
    parent = current.getparent()
    while parent is not None:
        steps.append(sum(1 for sibling in current.itersiblings(preceding=True) if is_element(sibling)))
        current = parent
        parent = current.getparent()
    steps.reverse()
    return steps


def resolve_child_index_path(root: etree._Element, steps: list[int]) -> etree._Element | None:
    current = root
    for step in steps:
        children = [child for child in current if is_element(child)]
        if step < 0 or step >= len(children):
            return None
        current = children[step]
    return current
