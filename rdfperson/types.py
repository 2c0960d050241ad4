"""Core types shared by the record classes, the registry and the store client.

Three RDF vocabularies are involved:

  EX     = http://example.com/ex#          source vocabulary (ex:Person)
  PERSON = http://example.com/ns/Person#   target instances and properties
  CLASS  = http://example.com/ns/Class#    target classes (Class:Person)

A Person lives in EX; a TransformedPerson lives in PERSON and is typed
Class:Person, while still reusing ex:firstName / ex:lastName.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable

from rdflib import Namespace
from rdflib.namespace import XSD

from .errors import ValidationError


# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------

EX = Namespace("http://example.com/ex#")
PERSON = Namespace("http://example.com/ns/Person#")
CLASS = Namespace("http://example.com/ns/Class#")

__all__ = [
    "EX",
    "PERSON",
    "CLASS",
    "XSD",
    "ValidationResult",
    "TurtleSerializable",
    "PlainRecordSerializable",
    "Validatable",
    "generate_uri",
    "iri_safe",
    "local_name_of",
    "require_text",
    "coerce_birth_date",
    "coerce_reference_date",
    "is_in_future",
]


# ---------------------------------------------------------------------------
# ValidationResult
# ---------------------------------------------------------------------------

@dataclass
class ValidationResult:
    """Outcome of an explicit validate() call.

    Every failing check is reported; nothing is raised.
    """
    valid: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> ValidationResult:
        return cls(valid=not errors, errors=list(errors))

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}

    def summary(self) -> str:
        if self.valid:
            return "VALID"
        lines = [f"INVALID ({len(self.errors)} errors)"]
        lines.extend(f"  - {e}" for e in self.errors)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

@runtime_checkable
class TurtleSerializable(Protocol):
    """Anything that can render itself as Turtle text."""

    def to_turtle(self, include_prefix: bool = True) -> str: ...


@runtime_checkable
class PlainRecordSerializable(Protocol):
    """Anything that can render itself as a JSON-compatible dict."""

    def to_plain_record(self) -> dict[str, Any]: ...


@runtime_checkable
class Validatable(Protocol):
    def validate(self) -> ValidationResult: ...


# ---------------------------------------------------------------------------
# URI helpers
# ---------------------------------------------------------------------------

_WHITESPACE = re.compile(r"\s+")

# Characters that may not appear unescaped in an IRI
_IRI_UNSAFE = re.compile(r'[\x00-\x20<>"{}|^`\\]')


def _percent_encode(match: re.Match) -> str:
    return "".join(f"%{b:02X}" for b in match.group(0).encode("utf-8"))


def iri_safe(text: str) -> str:
    """Percent-encode the characters an IRI may not contain."""
    return _IRI_UNSAFE.sub(_percent_encode, text)


def generate_uri(namespace: str, first_name: str, last_name: str) -> str:
    """Build `<namespace>` + first and last name with all whitespace removed.

    Characters that are not legal in an IRI (quotes, angle brackets,
    backslashes) are percent-encoded. Two people with identical names get
    identical URIs.
    """
    local = _WHITESPACE.sub("", f"{first_name}{last_name}")
    return f"{namespace}{iri_safe(local)}"


def local_name_of(uri: str) -> str:
    """Fragment after '#', falling back to the last path segment."""
    if "#" in uri:
        fragment = uri.split("#", 1)[1]
        if fragment:
            return fragment
    return uri.rstrip("/").split("/")[-1]


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def require_text(value: object, field_name: str, *, required: bool = True) -> str:
    """Return `value` trimmed, or raise ValidationError if it is not usable text."""
    if not isinstance(value, str) or not value.strip():
        qualifier = "is required and must be" if required else "must be"
        raise ValidationError(f"{field_name} {qualifier} a non-empty string", field=field_name)
    return value.strip()


def _moment_of(value: object, field_name: str) -> date | datetime:
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(
                f"{field_name} must be a valid ISO-8601 date, got {value!r}",
                field=field_name,
            ) from None
    raise ValidationError(
        f"{field_name} must be a date object or ISO-8601 string", field=field_name
    )


def _instant_of(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        return moment if moment.tzinfo is not None else moment.astimezone()
    return datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)


def coerce_birth_date(value: object, field_name: str = "birthDate") -> date:
    """Normalize a birth date and reject one that lies after the current instant.

    The stored calendar date is the one the value names, in its own
    timezone. Only the future check converts to an instant: a plain date
    counts as midnight UTC of that day, a naive datetime as local time.
    """
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field=field_name)
    moment = _moment_of(value, field_name)
    if is_in_future(_instant_of(moment)):
        raise ValidationError(f"{field_name} must be in the past", field=field_name)
    return moment.date() if isinstance(moment, datetime) else moment


def coerce_reference_date(value: object = None, field_name: str = "referenceDate") -> date:
    """Resolve the reference date used for age computation (default: today)."""
    if value is None:
        return date.today()
    moment = _moment_of(value, field_name)
    return moment.date() if isinstance(moment, datetime) else moment


def is_in_future(moment: date | datetime) -> bool:
    if not isinstance(moment, datetime):
        moment = datetime(moment.year, moment.month, moment.day, tzinfo=timezone.utc)
    return moment > datetime.now(timezone.utc)
