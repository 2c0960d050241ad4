"""Fixed-shape Turtle and JSON-LD helpers.

This is deliberately not a Turtle parser. Each record class reads back
exactly the one-subject shape it writes, by locating a fixed set of
sub-patterns in the text. If any sub-pattern is absent the read fails with
a ParseError naming every missing piece; partial data is never returned.
"""

from __future__ import annotations

import re
from typing import Any

from .errors import ParseError
from .types import CLASS, EX, PERSON, XSD, iri_safe


# ---------------------------------------------------------------------------
# Prefix blocks
# ---------------------------------------------------------------------------

SOURCE_PREFIXES = (
    f"@prefix ex: <{EX}> .\n"
    f"@prefix xsd: <{XSD}> .\n"
    "\n"
)

TARGET_PREFIXES = (
    f"@prefix Person: <{PERSON}> .\n"
    f"@prefix Class: <{CLASS}> .\n"
    f"@prefix ex: <{EX}> .\n"
    f"@prefix xsd: <{XSD}> .\n"
    "\n"
)


# ---------------------------------------------------------------------------
# JSON-LD contexts (fresh dict per call so callers may mutate the result)
# ---------------------------------------------------------------------------

def source_context() -> dict[str, Any]:
    return {
        "ex": str(EX),
        "xsd": str(XSD),
        "firstName": "ex:firstName",
        "lastName": "ex:lastName",
        "birthDate": {"@id": "ex:birthDate", "@type": "xsd:date"},
    }


def target_context() -> dict[str, Any]:
    return {
        "Person": str(PERSON),
        "Class": str(CLASS),
        "ex": str(EX),
        "xsd": str(XSD),
        "firstName": "ex:firstName",
        "lastName": "ex:lastName",
        "fullName": "Person:fullName",
        "age": {"@id": "Person:age", "@type": "xsd:integer"},
    }


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_STRING_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r", "t": "\t"}

# Local names written as prefix:local; anything else is written as a full IRI
_PLAIN_LOCAL = re.compile(r"\w[\w-]*")


def turtle_string(text: str) -> str:
    """Quote `text` as a Turtle string literal."""
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in text) + '"'


def unescape_string(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: _STRING_UNESCAPES.get(m.group(1), m.group(1)), body)


def turtle_subject(prefix: str, namespace: str, local: str) -> str:
    """`prefix:local` when that is a plain prefixed name, else `<namespace+local>`."""
    if _PLAIN_LOCAL.fullmatch(local):
        return f"{prefix}:{local}"
    return f"<{namespace}{iri_safe(local)}>"


# ---------------------------------------------------------------------------
# Sub-patterns
# ---------------------------------------------------------------------------

def _subject(prefix: str, namespace: str, rdf_type: str) -> re.Pattern:
    return re.compile(
        rf"(?:{prefix}:(\w[\w-]*)|<{re.escape(namespace)}([^>\s]+)>)\s+a\s+{rdf_type}\b"
    )


_STRING = r'"((?:[^"\\]|\\.)*)"'

SOURCE_PATTERNS: dict[str, re.Pattern] = {
    "subject": _subject("ex", str(EX), "ex:Person"),
    "firstName": re.compile(rf"ex:firstName\s+{_STRING}"),
    "lastName": re.compile(rf"ex:lastName\s+{_STRING}"),
    "birthDate": re.compile(rf"ex:birthDate\s+{_STRING}\^\^xsd:date"),
}

TARGET_PATTERNS: dict[str, re.Pattern] = {
    "subject": _subject("Person", str(PERSON), "Class:Person"),
    "firstName": re.compile(rf"ex:firstName\s+{_STRING}"),
    "lastName": re.compile(rf"ex:lastName\s+{_STRING}"),
    "fullName": re.compile(rf"Person:fullName\s+{_STRING}"),
    "age": re.compile(r"Person:age\s+(\d+)(?!\d|\.\d|[eE])"),
}

# Captures that are Turtle string literals and need unescaping
_LITERAL_FIELDS = {"firstName", "lastName", "birthDate", "fullName"}


def extract_fields(text: str, patterns: dict[str, re.Pattern], shape: str) -> dict[str, str]:
    """Return the first capture of every pattern, or raise ParseError.

    Only the first occurrence of each pattern is used, so text holding
    several subjects yields the first one. String literals come back
    unescaped; the subject comes back as its local name, whether it was
    written as a prefixed name or a full IRI.
    """
    if not isinstance(text, str):
        raise ParseError(f"Invalid Turtle format for {shape}: expected text, got {type(text).__name__}")

    found: dict[str, str] = {}
    missing: list[str] = []
    for name, pattern in patterns.items():
        match = pattern.search(text)
        if match is None:
            missing.append(name)
            continue
        # Alternation leaves exactly one capture group set
        value = match.group(match.lastindex)
        found[name] = unescape_string(value) if name in _LITERAL_FIELDS else value

    if missing:
        raise ParseError(
            f"Invalid Turtle format for {shape}: missing {', '.join(missing)}",
            missing=missing,
        )
    return found
