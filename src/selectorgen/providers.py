from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from lxml import etree

from .dom_utils import class_tokens, element_index
from .models import Descriptor, Dialect, GeneratorOptions
from .selector_rules import (
    css_round_trips,
    escape_css_identifier,
    escape_css_string,
    is_xpath_name,
    xpath_literal,
)

WILDCARD_PENALTY = 3.0


class ProviderKind(str, Enum):
    IDENTIFIER = "identifier"
    ATTRIBUTE = "attribute"
    CLASS = "class"
    TAG = "tag"
    POSITIONAL = "positional"


DEFAULT_PRIORITY: tuple[ProviderKind, ...] = (
    ProviderKind.IDENTIFIER,
    ProviderKind.ATTRIBUTE,
    ProviderKind.CLASS,
    ProviderKind.TAG,
    ProviderKind.POSITIONAL,
)

PENALTIES: dict[ProviderKind, float] = {
    ProviderKind.IDENTIFIER: 0.0,
    ProviderKind.ATTRIBUTE: 0.5,
    ProviderKind.CLASS: 1.0,
    ProviderKind.TAG: 2.0,
    ProviderKind.POSITIONAL: 1.0,
}


def wildcard() -> Descriptor:
    return Descriptor(text="*", penalty=WILDCARD_PENALTY)


@dataclass(frozen=True, slots=True)
class DescriptorProvider:
    kind: ProviderKind
    options: GeneratorOptions

    @property
    def dialect(self) -> Dialect:
        return self.options.dialect

    @property
    def penalty(self) -> float:
        return PENALTIES[self.kind]

    def propose(self, node: etree._Element) -> Descriptor | None:
        if self.kind is ProviderKind.IDENTIFIER:
            text = self._identifier(node)
        elif self.kind is ProviderKind.ATTRIBUTE:
            text = self._attribute(node)
        elif self.kind is ProviderKind.CLASS:
            text = self._class(node)
        elif self.kind is ProviderKind.TAG:
            text = self._tag(node)
        else:
            text = self._positional(node)
        if text is None:
            return None
        return Descriptor(text=text, penalty=self.penalty)

    def _identifier(self, node: etree._Element) -> str | None:
        id_value = node.get("id")
        if not id_value or not self.options.id_name(id_value):
            return None
        if self.dialect == "xpath":
            return f"*[@id={xpath_literal(id_value)}]"
        if not css_round_trips(id_value):
            return None
        return f"#{escape_css_identifier(id_value)}"

    def _attribute(self, node: etree._Element) -> str | None:
        for name, value in node.items():
            if not isinstance(name, str) or name.startswith("{"):
                continue
            if self.dialect == "css" and not (css_round_trips(name) and css_round_trips(value)):
                continue
            if not self.options.attr(name, value):
                continue
            if self.dialect == "xpath":
                if is_xpath_name(name):
                    return f"*[@{name}={xpath_literal(value)}]"
                # Prefixed names like foo:bar would be read as namespace lookups.
                return f"*[@*[name()={xpath_literal(name)}]={xpath_literal(value)}]"
            return f'[{escape_css_identifier(name)}="{escape_css_string(value)}"]'
        return None

    def _class(self, node: etree._Element) -> str | None:
        for token in class_tokens(node):
            if self.dialect == "css" and not css_round_trips(token):
                continue
            if not self.options.class_name(token):
                continue
            if self.dialect == "xpath":
                padded = xpath_literal(f" {token} ")
                return f"*[contains(concat(' ', normalize-space(@class), ' '), {padded})]"
            return f".{escape_css_identifier(token)}"
        return None

    def _tag(self, node: etree._Element) -> str | None:
        tag = node.tag
        # Namespaced tags ({uri}local) have no plain selector spelling.
        if tag.startswith("{") or not self.options.tag_name(tag):
            return None
        if self.dialect == "xpath":
            return tag if is_xpath_name(tag) else f"*[name()={xpath_literal(tag)}]"
        if not css_round_trips(tag):
            return None
        return escape_css_identifier(tag)

    def _positional(self, node: etree._Element) -> str | None:
        index = element_index(node)
        if index is None:
            return None
        if self.dialect == "xpath":
            return f"*[{index}]"
        return f":nth-child({index})"


class ProviderChain:
    """Ordered descriptor providers; the first one that succeeds wins per node."""

    def __init__(self, providers: Iterable[DescriptorProvider]) -> None:
        self.providers = tuple(providers)

    @classmethod
    def default(cls, options: GeneratorOptions) -> ProviderChain:
        return cls(DescriptorProvider(kind, options) for kind in DEFAULT_PRIORITY)

    @property
    def kinds(self) -> tuple[ProviderKind, ...]:
        return tuple(provider.kind for provider in self.providers)

    def describe(self, node: etree._Element) -> tuple[ProviderKind, Descriptor] | None:
        for provider in self.providers:
            descriptor = provider.propose(node)
            if descriptor is not None:
                return provider.kind, descriptor
        return None

    def propose(self, node: etree._Element) -> Descriptor | None:
        described = self.describe(node)
        return described[1] if described else None
