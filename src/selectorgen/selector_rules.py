from __future__ import annotations

import re
from dataclasses import dataclass
from math import log2

ROOT_ID_BLOCKLIST = {"__next", "root", "app", "__nuxt", "gatsby-focus-wrapper"}
ROOT_ID_BLOCKLIST_LOWER = {item.lower() for item in ROOT_ID_BLOCKLIST}

TEST_ATTR_PRIORITY = (
    "data-testid",
    "data-test",
    "data-qa",
    "data-cy",
    "data-e2e",
)

_DYNAMIC_VALUE_PATTERNS = (
    re.compile(r"^[0-9]{4,}$"),
    re.compile(r"^[a-f0-9]{8,}$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12}$", re.IGNORECASE),
    re.compile(r".*\d{4,}.*"),
)

_FRAMEWORK_TOKEN_PATTERNS = (
    re.compile(r"(^|[-_:])(mui|css|ng|react|vue|ember|svelte|jdt|j_idt|sc)([-_:]|$)", re.IGNORECASE),
    re.compile(r"^ant-[a-z0-9_-]+$", re.IGNORECASE),
)

_XPATH_NAME_PATTERN = re.compile(r"[^\W\d][\w.-]*")

_DYNAMIC_CLASS_PATTERNS = (
    re.compile(r"^css-[a-z0-9_-]{4,}$", re.IGNORECASE),
    re.compile(r"^jss\d+$", re.IGNORECASE),
    re.compile(r"^sc-[a-z0-9]+$", re.IGNORECASE),
    re.compile(r"^[a-f0-9]{8,}$", re.IGNORECASE),
    re.compile(r"^[a-z]+__[a-z]+___[a-z0-9]{5,}$", re.IGNORECASE),
)


@dataclass(frozen=True, slots=True)
class ValueStability:
    attribute: str
    value: str
    stable: bool
    dynamic: bool
    score: float
    entropy: float
    digit_ratio: float
    reasons: tuple[str, ...]


def normalize_space(value: str | None, limit: int = 200) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    return compact[:limit] if compact else ""


def shannon_entropy(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    total = len(text)
    frequencies: dict[str, int] = {}
    for char in text:
        frequencies[char] = frequencies.get(char, 0) + 1

    entropy = 0.0
    for count in frequencies.values():
        probability = count / total
        entropy -= probability * log2(probability)
    return entropy


def digit_ratio(value: str) -> float:
    text = value.strip()
    if not text:
        return 0.0
    digits = sum(1 for char in text if char.isdigit())
    return digits / len(text)


def has_framework_fingerprint(value: str) -> bool:
    text = value.strip()
    if not text:
        return False
    return any(pattern.search(text) for pattern in _FRAMEWORK_TOKEN_PATTERNS)


def has_hash_like_pattern(value: str) -> bool:
    text = value.strip()
    if not text:
        return False
    if re.fullmatch(r"[a-f0-9]{8,}", text, flags=re.IGNORECASE):
        return True
    if re.search(r"[a-f0-9]{10,}", text, flags=re.IGNORECASE):
        return True
    return False


def analyze_value_stability(attr: str, value: str) -> ValueStability:
    """Score how likely an attribute value is to survive a page rebuild.

    Values that look generated (hash fragments, long digit runs, framework
    prefixes) are flagged ``dynamic`` and never ``stable``.
    """
    attribute = normalize_space(attr, limit=60).lower()
    normalized = normalize_space(value, limit=200)
    reasons: list[str] = []
    score = 100.0

    if not normalized:
        return ValueStability(attribute, normalized, False, True, 0.0, 0.0, 0.0, ("empty",))

    entropy_value = shannon_entropy(normalized)
    digit_value = digit_ratio(normalized)

    if len(normalized) < 2:
        score -= 60
        reasons.append("too-short")
    if len(normalized) > 120:
        score -= 20
        reasons.append("too-long")
    if digit_value > 0.4:
        score -= 45
        reasons.append("digit-ratio>40%")
    elif digit_value > 0.25:
        score -= 18
        reasons.append("digit-ratio>25%")

    if entropy_value >= 4.2 and len(normalized) >= 8:
        score -= 35
        reasons.append("high-entropy")
    elif entropy_value >= 3.7 and len(normalized) >= 8:
        score -= 16
        reasons.append("medium-entropy")

    framework = has_framework_fingerprint(normalized)
    if framework:
        score -= 40
        reasons.append("framework-token")

    hash_like = has_hash_like_pattern(normalized)
    if hash_like:
        score -= 35
        reasons.append("hash-like")

    if re.search(r"[_:-]\d{3,}$", normalized):
        score -= 24
        reasons.append("numeric-drift-suffix")
    if any(pattern.match(normalized) for pattern in _DYNAMIC_VALUE_PATTERNS):
        score -= 28
        reasons.append("dynamic-pattern")
    if re.fullmatch(r"\d+", normalized):
        score -= 65
        reasons.append("numeric-only")

    if attribute == "id" and is_blocked_root_id(normalized):
        score -= 70
        reasons.append("blocked-root-id")
    if attribute in TEST_ATTR_PRIORITY:
        score += 8
        reasons.append("semantic-test-attr")

    dynamic = (
        digit_value > 0.4
        or entropy_value >= 4.2
        or framework
        or hash_like
        or "numeric-drift-suffix" in reasons
    )

    bounded = max(0.0, min(100.0, score))
    return ValueStability(
        attribute=attribute,
        value=normalized,
        stable=bounded >= 55 and not dynamic,
        dynamic=dynamic,
        score=round(bounded, 2),
        entropy=round(entropy_value, 4),
        digit_ratio=round(digit_value, 4),
        reasons=tuple(reasons),
    )


def is_blocked_root_id(id_value: str) -> bool:
    return id_value.strip().lower() in ROOT_ID_BLOCKLIST_LOWER


def is_dynamic_class_token(token: str) -> bool:
    value = token.strip()
    if not value:
        return True
    if any(pattern.match(value) for pattern in _DYNAMIC_CLASS_PATTERNS):
        return True
    if len(value) > 18 and re.search(r"\d", value):
        return True
    if value.count("-") >= 3 and re.search(r"\d", value):
        return True
    return False


def stable_id_name(id_value: str) -> bool:
    value = id_value.strip()
    if not value or is_blocked_root_id(value):
        return False
    # JSF / PrimeFaces generated ids
    if ":" in value and re.search(r"(:\d+:|:j_idt\d+|:jdt_\d+)", value, flags=re.IGNORECASE):
        return False
    return analyze_value_stability("id", value).stable


def stable_class_name(token: str) -> bool:
    return not is_dynamic_class_token(token)


def stable_test_attribute(name: str, value: str) -> bool:
    if name.strip().lower() not in TEST_ATTR_PRIORITY:
        return False
    return analyze_value_stability(name, value).stable


def escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\a ")


def css_round_trips(value: str) -> bool:
    # cssselect unescapes twice, so no escape spelling of a backslash survives.
    return "\\" not in value


def escape_css_identifier(value: str) -> str:
    if value == "-":
        return "\\-"
    escaped: list[str] = []
    for position, char in enumerate(value):
        after_hyphen = position == 1 and value[0] == "-"
        must_escape = (char.isdigit() and (position == 0 or after_hyphen)) or (char == "-" and after_hyphen)
        if (char.isalnum() or char in ("-", "_") or ord(char) >= 0x80) and not must_escape:
            escaped.append(char)
        else:
            escaped.append(f"\\{ord(char):x} ")
    return "".join(escaped)


def is_xpath_name(name: str) -> bool:
    """True when ``name`` can be written as a bare XPath name test (an NCName)."""
    return _XPATH_NAME_PATTERN.fullmatch(name) is not None


def xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    pieces = value.split("'")
    quoted = [f"'{piece}'" for piece in pieces]
    return "concat(" + ", \"'\", ".join(quoted) + ")"
