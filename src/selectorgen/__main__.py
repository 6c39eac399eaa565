from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence

from lxml import etree, html

from .capture import generate_for_handle
from .errors import SelectorGenerationError
from .generator import SelectorGenerator
from .logs import build_logger
from .models import GeneratorOptions
from .oracle import query_scope

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)


def _is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="selectorgen",
        description="Print a short locator that selects exactly one element.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("page", nargs="?", type=Path, help="HTML file to load")
    source.add_argument("--url", help="open a live page with Playwright instead of a file")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--target-css", help="CSS selector of the element to describe (first match)")
    target.add_argument("--target-xpath", help="XPath of the element to describe (first match)")
    parser.add_argument("--scope-css", help="limit uniqueness to the first element matching this CSS selector")
    parser.add_argument("--dialect", choices=("css", "xpath"), default="css")
    parser.add_argument("--timeout-ms", type=int)
    parser.add_argument("--max-depth", type=int)
    parser.add_argument("--attr", action="append", default=[], metavar="NAME", help="attribute name usable in locators")
    parser.add_argument("--stable", action="store_true", help="skip generated ids and classes")
    parser.add_argument("--debug", action="store_true", help="log every synthesis step")
    return parser


def _options_from_args(args: argparse.Namespace) -> GeneratorOptions:
    overrides: dict[str, Any] = {
        "dialect": args.dialect,
        "timeout_ms": args.timeout_ms,
        "max_depth": args.max_depth,
        "debug": args.debug,
    }
    if args.attr:
        allowed = {name.strip().lower() for name in args.attr if name.strip()}
        overrides["attr"] = lambda name, _value: name.lower() in allowed
    if args.stable:
        return GeneratorOptions.stable(**overrides)
    return GeneratorOptions(**overrides)


def _first_match(root: etree._Element, css: str | None, xpath: str | None) -> etree._Element | None:
    if css:
        matches = query_scope(root, css, "css")
    else:
        matches = query_scope(root, xpath or "", "xpath")
    return matches[0] if matches else None


def _run_file(args: argparse.Namespace, options: GeneratorOptions) -> str:
    root = html.parse(str(args.page)).getroot()
    target = _first_match(root, args.target_css, args.target_xpath)
    if target is None:
        raise LookupError("No element matches the target query.")
    if args.scope_css:
        scope = _first_match(root, args.scope_css, None)
        if scope is None:
            raise LookupError("No element matches the scope query.")
        options = options.with_overrides(scope=scope)
    return SelectorGenerator(options).generate(target)


def _run_url(args: argparse.Namespace, options: GeneratorOptions) -> str:
    from playwright.sync_api import sync_playwright

    with sync_playwright() as playwright:
        browser = playwright.chromium.launch(headless=True)
        try:
            page = browser.new_page()
            page.goto(args.url)
            query = args.target_css if args.target_css else f"xpath={args.target_xpath}"
            element = page.query_selector(query)
            if element is None:
                raise LookupError("No element matches the target query.")
            return generate_for_handle(page, element, options).selector
        finally:
            browser.close()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = build_logger()
    options = _options_from_args(args)
    try:
        if args.url:
            selector = _run_url(args, options)
        else:
            selector = _run_file(args, options)
    except (SelectorGenerationError, LookupError, OSError) as exc:
        logger.error("Selector generation failed: %s", exc)
        print(f"selectorgen: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        if not _is_missing_browser_error(exc):
            raise
        print("selectorgen: Playwright browser is missing; run `playwright install chromium`.", file=sys.stderr)
        return 2
    print(selector)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
