"""TransformedPerson — the derived record, typed Class:Person in the target vocabulary.

Fields: uri, first_name, last_name, full_name, age.

full_name is redundant and must always equal "<first_name> <last_name>".
Setting first_name or last_name recomputes it; setting full_name directly
is only accepted when it already matches.

Validation runs in two tiers:

  Construction / setters:  names non-empty, full_name consistent, 0 <= age <= 150
  validate():              the above plus full_name length >= 3 and the
                           letters-only two-token pattern "<Letters> <Letters>"

A record with a hyphenated or accented name can therefore be constructed
but reports itself invalid.

Serialized shape:

  Person:JaneDoe a Class:Person ;
      ex:firstName "Jane" ;
      ex:lastName "Doe" ;
      Person:fullName "Jane Doe" ;
      Person:age 26 .
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any

from .errors import ValidationError
from .formats import (
    TARGET_PATTERNS,
    TARGET_PREFIXES,
    extract_fields,
    target_context,
    turtle_string,
    turtle_subject,
)
from .person import Person
from .types import (
    CLASS,
    EX,
    PERSON,
    ValidationResult,
    generate_uri,
    local_name_of,
    require_text,
)

logger = logging.getLogger(__name__)

MIN_AGE = 0
MAX_AGE = 150

_FULL_NAME_PATTERN = re.compile(r"^[A-Za-z]+ [A-Za-z]+$")


def _check_age(value: object) -> int:
    """Return `value` as an int in MIN_AGE..MAX_AGE, or raise ValidationError.

    A float is accepted only when it is a whole number (26.0), so NaN,
    infinities and fractions are all rejected.
    """
    message = f"age must be a whole number between {MIN_AGE} and {MAX_AGE}"
    # bool is an int subclass but never a valid age
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(message, field="age")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(message, field="age")
        value = int(value)
    if value < MIN_AGE or value > MAX_AGE:
        raise ValidationError(message, field="age")
    return value


def _mismatch(full_name: str, expected: str) -> ValidationError:
    return ValidationError(
        f'fullName "{full_name}" must match "firstName lastName" ("{expected}")',
        field="fullName",
    )


class TransformedPerson:
    """A person in the target vocabulary, carrying a computed age."""

    RDF_TYPE = CLASS.Person
    NAMESPACE = str(PERSON)

    def __init__(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        full_name: str | None = None,
        age: int | None = None,
        uri: str | None = None,
    ):
        first = require_text(first_name, "firstName")
        last = require_text(last_name, "lastName")
        full = require_text(full_name, "fullName")
        years = _check_age(age)

        expected = f"{first} {last}"
        if full != expected:
            raise _mismatch(full, expected)

        self._uri = uri or generate_uri(self.NAMESPACE, first_name, last_name)
        self._first_name = first
        self._last_name = last
        self._full_name = full
        self._age = years

    # -----------------------------------------------------------------------
    # Derivation
    # -----------------------------------------------------------------------

    @classmethod
    def derive_from(
        cls,
        person: Person,
        reference_date: date | datetime | str | None = None,
        *,
        strict: bool = False,
    ) -> TransformedPerson:
        """Build the target-vocabulary record for `person`.

        The URI keeps its local name and swaps the EX prefix for the PERSON
        prefix. A URI outside EX is copied unchanged (with a warning) unless
        `strict` is set, in which case a ValidationError is raised.
        """
        if not isinstance(person, Person):
            raise TypeError(f"derive_from expects a Person, got {type(person).__name__}")

        source_prefix = str(EX)
        if person.uri.startswith(source_prefix):
            uri = str(PERSON) + person.uri[len(source_prefix):]
        elif strict:
            raise ValidationError(
                f"uri {person.uri!r} is not in the source namespace {source_prefix}",
                field="uri",
            )
        else:
            logger.warning(
                "URI %s is outside %s; copied to the transformed record unchanged",
                person.uri, source_prefix,
            )
            uri = person.uri

        return cls(
            uri=uri,
            first_name=person.first_name,
            last_name=person.last_name,
            full_name=person.full_name,
            age=person.age(reference_date),
        )

    from_person = derive_from

    # -----------------------------------------------------------------------
    # Identity and fields
    # -----------------------------------------------------------------------

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def local_name(self) -> str:
        return local_name_of(self._uri)

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, value: str) -> None:
        self._first_name = require_text(value, "firstName", required=False)
        self._full_name = f"{self._first_name} {self._last_name}"

    @property
    def last_name(self) -> str:
        return self._last_name

    @last_name.setter
    def last_name(self, value: str) -> None:
        self._last_name = require_text(value, "lastName", required=False)
        self._full_name = f"{self._first_name} {self._last_name}"

    @property
    def full_name(self) -> str:
        return self._full_name

    @full_name.setter
    def full_name(self, value: str) -> None:
        trimmed = require_text(value, "fullName", required=False)
        expected = f"{self._first_name} {self._last_name}"
        if trimmed != expected:
            raise _mismatch(trimmed, expected)
        self._full_name = trimmed

    @property
    def age(self) -> int:
        return self._age

    @age.setter
    def age(self, value: int) -> None:
        self._age = _check_age(value)

    def evolve(self, **changes: Any) -> TransformedPerson:
        """Return a new validated record with `changes` applied.

        Changing a name component without passing full_name recomputes it.
        """
        fields = {
            "uri": self._uri,
            "first_name": self._first_name,
            "last_name": self._last_name,
            "age": self._age,
        }
        fields.update(changes)
        if "full_name" not in changes:
            first = fields["first_name"]
            last = fields["last_name"]
            if isinstance(first, str) and isinstance(last, str):
                fields["full_name"] = f"{first.strip()} {last.strip()}"
            else:
                fields["full_name"] = self._full_name
        return TransformedPerson(**fields)

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        errors: list[str] = []

        if not self._first_name:
            errors.append("firstName is required and must be non-empty")
        if not self._last_name:
            errors.append("lastName is required and must be non-empty")
        if not self._full_name or len(self._full_name) < 3:
            errors.append("fullName is required and must be at least 3 characters")
        if not _FULL_NAME_PATTERN.match(self._full_name or ""):
            errors.append('fullName must be in format "FirstName LastName"')
        if self._full_name != f"{self._first_name} {self._last_name}":
            errors.append(f'fullName "{self._full_name}" must match "firstName lastName"')
        try:
            _check_age(self._age)
        except ValidationError as exc:
            errors.append(str(exc))

        return ValidationResult.from_errors(errors)

    # -----------------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------------

    def to_turtle(self, include_prefix: bool = True) -> str:
        prefix = TARGET_PREFIXES if include_prefix else ""
        return (
            f"{prefix}{turtle_subject('Person', self.NAMESPACE, self.local_name)} a Class:Person ;\n"
            f"    ex:firstName {turtle_string(self._first_name)} ;\n"
            f"    ex:lastName {turtle_string(self._last_name)} ;\n"
            f"    Person:fullName {turtle_string(self._full_name)} ;\n"
            f"    Person:age {self._age} ."
        )

    def to_json_ld(self) -> dict[str, Any]:
        return {
            "@context": target_context(),
            "@id": self._uri,
            "@type": "Class:Person",
            "firstName": self._first_name,
            "lastName": self._last_name,
            "fullName": self._full_name,
            "age": self._age,
        }

    def to_plain_record(self) -> dict[str, Any]:
        return {
            "uri": self._uri,
            "localName": self.local_name,
            "firstName": self._first_name,
            "lastName": self._last_name,
            "fullName": self._full_name,
            "age": self._age,
        }

    @classmethod
    def from_plain_record(cls, record: dict[str, Any]) -> TransformedPerson:
        return cls(
            uri=record.get("uri"),
            first_name=record.get("firstName"),
            last_name=record.get("lastName"),
            full_name=record.get("fullName"),
            age=record.get("age"),
        )

    @classmethod
    def from_json_ld(cls, document: dict[str, Any]) -> TransformedPerson:
        return cls(
            uri=document.get("@id"),
            first_name=document.get("firstName"),
            last_name=document.get("lastName"),
            full_name=document.get("fullName"),
            age=document.get("age"),
        )

    @classmethod
    def from_turtle(cls, turtle: str) -> TransformedPerson:
        """Read back the exact shape written by to_turtle()."""
        fields = extract_fields(turtle, TARGET_PATTERNS, shape="Class:Person")
        return cls(
            uri=f"{cls.NAMESPACE}{fields['subject']}",
            first_name=fields["firstName"],
            last_name=fields["lastName"],
            full_name=fields["fullName"],
            age=int(fields["age"]),
        )

    # -----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransformedPerson):
            return NotImplemented
        return (
            self._uri == other._uri
            and self._first_name == other._first_name
            and self._last_name == other._last_name
            and self._full_name == other._full_name
            and self._age == other._age
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"TransformedPerson(uri={self._uri!r}, age={self._age!r})"

    def __str__(self) -> str:
        return f"TransformedPerson {{ {self._full_name}, age {self._age} }}"


# ---------------------------------------------------------------------------
# Transformation function
# ---------------------------------------------------------------------------

def transform_person(
    person: Person,
    reference_date: date | datetime | str | None = None,
    *,
    strict: bool = False,
) -> TransformedPerson:
    """Person x reference date -> TransformedPerson.

    Remaps the namespace, copies both names, synthesizes the full name and
    computes the age at `reference_date`. The result is built through the
    TransformedPerson constructor, so its invariants are checked again.
    """
    return TransformedPerson.derive_from(person, reference_date, strict=strict)
