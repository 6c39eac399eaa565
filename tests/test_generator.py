import logging

import pytest
from lxml import etree, html

from selectorgen import (
    GenerationTimeoutError,
    GeneratorOptions,
    InvalidInputError,
    SelectorGenerator,
    UnresolvableSelectorError,
    generate_selector,
)
from selectorgen.oracle import query_scope

LOGIN_PAGE = (
    "<html><head><title>Login</title></head><body>"
    '<form><input name="user"><button id="login-btn">Go</button></form>'
    "</body></html>"
)

BUTTONS_PAGE = (
    "<html><head></head><body>"
    '<div><button class="btn-primary">A</button></div>'
    '<div><button class="btn-primary">B</button></div>'
    '<form><button class="btn-primary">Go</button></form>'
    "</body></html>"
)

PANELS_PAGE = (
    "<html><head></head><body>"
    '<div class="panel"><ul><li><span class="label">a</span></li></ul></div>'
    '<div class="other"><ul><li><span class="label">b</span></li></ul></div>'
    "</body></html>"
)


class ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _logger(name: str) -> tuple[logging.Logger, ListHandler]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = ListHandler()
    logger.handlers = [handler]
    return logger, handler


def test_unique_identifier_gives_identifier_only_locator() -> None:
    root = html.document_fromstring(LOGIN_PAGE)
    target = root.get_element_by_id("login-btn")

    assert generate_selector(target) == "#login-btn"


def test_shared_class_is_combined_with_parent_tag() -> None:
    root = html.document_fromstring(BUTTONS_PAGE)
    target = root.cssselect("form button")[0]

    selector = generate_selector(target)

    assert selector == "form > .btn-primary"
    assert query_scope(root, selector) == [target]


def test_xpath_dialect() -> None:
    root = html.document_fromstring(BUTTONS_PAGE)
    target = root.cssselect("form button")[0]

    selector = generate_selector(target, dialect="xpath")

    assert selector == "//form/*[contains(concat(' ', normalize-space(@class), ' '), ' btn-primary ')]"
    assert root.xpath(selector) == [target]


def test_generate_is_idempotent() -> None:
    root = html.document_fromstring(PANELS_PAGE)
    target = root.cssselect(".panel .label")[0]
    generator = SelectorGenerator()

    first = generator.generate(target)
    second = generator.generate(target)

    assert first == second == ".panel .label"


def test_round_trip_selects_only_the_target() -> None:
    root = html.document_fromstring(
        "<html><head></head><body>"
        '<header id="top"><nav class="menu"><a href="/">Home</a><a href="/about">About</a></nav></header>'
        '<main><section class="card"><h2>One</h2><p>x</p></section>'
        '<section class="card"><h2>Two</h2><p>y</p></section></main>'
        "</body></html>"
    )
    generator = SelectorGenerator(
        tag_name=lambda tag: tag not in {"a", "section", "h2", "p"},
        class_name=lambda token: token != "card",
    )

    for dialect in ("css", "xpath"):
        generator = SelectorGenerator(generator.options, dialect=dialect)
        for target in root.cssselect("nav a, section, h2, p"):
            selector = generator.generate(target)
            assert query_scope(root, selector, dialect) == [target], selector


def test_document_root_returns_token_without_consulting_providers() -> None:
    root = html.document_fromstring('<html id="doc"><head></head><body></body></html>')
    seen: list[str] = []

    def id_name(value: str) -> bool:
        seen.append(value)
        return True

    assert generate_selector(root, id_name=id_name, timeout_ms=0) == "html"
    assert generate_selector(root, dialect="xpath") == "/html"
    assert seen == []


def test_non_element_input_is_rejected_before_traversal() -> None:
    root = html.document_fromstring("<html><head></head><body><!-- hi --><p>x</p></body></html>")
    comment = root.find("body")[0]
    generator = SelectorGenerator(id_name=lambda value: pytest.fail("providers must not run"))

    for value in (None, "p", 42, comment):
        with pytest.raises(InvalidInputError):
            generator.generate(value)


def test_target_outside_scope_is_rejected() -> None:
    root = html.document_fromstring(
        '<html><head></head><body><section id="a"><p>x</p></section><section id="b"></section></body></html>'
    )
    scope = root.get_element_by_id("b")
    target = root.cssselect("#a p")[0]

    with pytest.raises(InvalidInputError):
        generate_selector(target, scope=scope)


def test_uniqueness_is_evaluated_within_scope() -> None:
    root = html.document_fromstring(
        "<html><head></head><body>"
        '<section id="s1"><p class="x">a</p></section>'
        '<section id="s2"><p class="x">b</p></section>'
        "</body></html>"
    )
    scope = root.get_element_by_id("s2")
    target = scope[0]

    assert generate_selector(target) == "#s2 > .x"
    assert generate_selector(target, scope=scope) == ".x"


def test_zero_timeout_fails_instead_of_returning_partial_selector() -> None:
    root = html.document_fromstring(PANELS_PAGE)
    target = root.cssselect(".panel .label")[0]

    with pytest.raises(GenerationTimeoutError):
        generate_selector(target, timeout_ms=0)


def test_indistinguishable_targets_are_unresolvable() -> None:
    root = html.document_fromstring("<html><head></head><body><ul><li>a</li><li>b</li></ul></body></html>")
    target = root.cssselect("li")[1]

    with pytest.raises(UnresolvableSelectorError):
        generate_selector(target)


def test_instance_reuse_does_not_leak_uniqueness_between_calls() -> None:
    root = html.document_fromstring('<html><head></head><body><p class="note">1</p></body></html>')
    first = root.cssselect("p")[0]
    generator = SelectorGenerator()

    assert generator.generate(first) == ".note"

    box = etree.SubElement(root.find("body"), "div", id="box")
    second = etree.SubElement(box, "p", {"class": "note"})

    assert generator.generate(second) == "#box > .note"
    assert generator.generate(first) == "body > .note"


def test_seed_then_optimize_pipeline() -> None:
    root = html.document_fromstring(LOGIN_PAGE)
    target = root.get_element_by_id("login-btn")

    assert generate_selector(target, seed_min_length=10) == "form > #login-btn"
    assert generate_selector(target, seed_min_length=10, optimized_min_length=4) == "html > body > form > #login-btn"


def test_stable_options_skip_generated_ids() -> None:
    root = html.document_fromstring(
        "<html><head></head><body>"
        '<button id="ember1234" data-testid="login">Go</button>'
        "</body></html>"
    )
    target = root.find("body")[0]

    assert generate_selector(target) == "#ember1234"
    assert generate_selector(target, GeneratorOptions.stable()) == '[data-testid="login"]'


def test_debug_trace_is_emitted_at_info_only_when_enabled() -> None:
    root = html.document_fromstring(LOGIN_PAGE)
    target = root.get_element_by_id("login-btn")

    logger, handler = _logger("selectorgen.test.quiet")
    assert SelectorGenerator(logger=logger).generate(target) == "#login-btn"
    assert handler.records
    assert all(record.levelno == logging.DEBUG for record in handler.records)

    logger, handler = _logger("selectorgen.test.debug")
    assert SelectorGenerator(logger=logger, debug=True).generate(target) == "#login-btn"
    messages = [record.getMessage() for record in handler.records if record.levelno == logging.INFO]
    assert any("Generated selector #login-btn" in message for message in messages)


@pytest.mark.parametrize("dialect", ["css", "xpath"])
@pytest.mark.parametrize(
    ("markup", "overrides"),
    [
        pytest.param('<p>q</p><p class="--x">x</p>', {}, id="double-hyphen-class"),
        pytest.param('<p>q</p><p id="-1">x</p>', {}, id="hyphen-digit-id"),
        pytest.param('<div><p>q</p></div><p id="a\\b">x</p>', {}, id="backslash-id"),
        pytest.param('<div><p>q</p></div><p class="a\\b">x</p>', {}, id="backslash-class"),
        pytest.param(
            '<div><p>q</p></div><p foo:bar="1">x</p>',
            {"attr": lambda _name, _value: True},
            id="prefixed-attribute",
        ),
        pytest.param("<root><x/><a.b/></root>", {}, id="dotted-xml-tag"),
    ],
)
def test_unusual_names_round_trip(markup: str, overrides: dict, dialect: str) -> None:
    if markup.startswith("<root>"):
        root = etree.fromstring(markup)
        target = root[-1]
    else:
        root = html.document_fromstring(f"<html><head></head><body>{markup}</body></html>")
        target = root.find("body")[-1]

    selector = generate_selector(target, dialect=dialect, **overrides)

    assert query_scope(root, selector, dialect) == [target], selector
