"""Person — the source record, typed ex:Person in the EX vocabulary.

Fields: uri, first_name, last_name, birth_date.
Derived on demand: full_name, age(reference_date).

Invariants hold after construction and after every setter:
  - first_name and last_name are non-empty, trimmed strings
  - birth_date is not after the current instant

Serialized shapes:

  @prefix ex: <http://example.com/ex#> .
  @prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

  ex:JaneDoe a ex:Person ;
      ex:firstName "Jane" ;
      ex:lastName "Doe" ;
      ex:birthDate "2000-01-01"^^xsd:date .
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from .formats import (
    SOURCE_PATTERNS,
    SOURCE_PREFIXES,
    extract_fields,
    source_context,
    turtle_string,
    turtle_subject,
)
from .types import (
    EX,
    ValidationResult,
    coerce_birth_date,
    coerce_reference_date,
    generate_uri,
    is_in_future,
    local_name_of,
    require_text,
)


class Person:
    """A person in the source vocabulary.

    Construction validates every field. Setters validate before assigning,
    so a rejected value leaves the record unchanged.
    """

    RDF_TYPE = EX.Person
    NAMESPACE = str(EX)

    def __init__(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        birth_date: date | datetime | str | None = None,
        uri: str | None = None,
    ):
        first = require_text(first_name, "firstName")
        last = require_text(last_name, "lastName")
        born = coerce_birth_date(birth_date)

        self._uri = uri or generate_uri(self.NAMESPACE, first_name, last_name)
        self._first_name = first
        self._last_name = last
        self._birth_date = born

    # -----------------------------------------------------------------------
    # Identity and fields
    # -----------------------------------------------------------------------

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def local_name(self) -> str:
        """e.g. "JaneDoe" for http://example.com/ex#JaneDoe."""
        return local_name_of(self._uri)

    @property
    def first_name(self) -> str:
        return self._first_name

    @first_name.setter
    def first_name(self, value: str) -> None:
        self._first_name = require_text(value, "firstName", required=False)

    @property
    def last_name(self) -> str:
        return self._last_name

    @last_name.setter
    def last_name(self, value: str) -> None:
        self._last_name = require_text(value, "lastName", required=False)

    @property
    def birth_date(self) -> date:
        return self._birth_date

    @birth_date.setter
    def birth_date(self, value: date | datetime | str) -> None:
        self._birth_date = coerce_birth_date(value)

    @property
    def birth_date_iso(self) -> str:
        return self._birth_date.isoformat()

    @property
    def full_name(self) -> str:
        return f"{self._first_name} {self._last_name}"

    def age(self, reference_date: date | datetime | str | None = None) -> int:
        """Whole years between birth_date and reference_date (default today).

        One year is subtracted while the birthday has not yet been reached
        in the reference year, comparing (month, day) pairs.
        """
        ref = coerce_reference_date(reference_date)
        born = self._birth_date
        years = ref.year - born.year
        if (ref.month, ref.day) < (born.month, born.day):
            years -= 1
        return years

    def evolve(self, **changes: Any) -> Person:
        """Return a new validated Person with `changes` applied."""
        fields = {
            "uri": self._uri,
            "first_name": self._first_name,
            "last_name": self._last_name,
            "birth_date": self._birth_date,
        }
        fields.update(changes)
        return Person(**fields)

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate(self) -> ValidationResult:
        errors: list[str] = []

        if not self._first_name:
            errors.append("firstName is required and must be non-empty")
        if not self._last_name:
            errors.append("lastName is required and must be non-empty")
        if self._birth_date is None:
            errors.append("birthDate is required")
        elif is_in_future(self._birth_date):
            errors.append("birthDate must be in the past")

        return ValidationResult.from_errors(errors)

    # -----------------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------------

    def to_turtle(self, include_prefix: bool = True) -> str:
        prefix = SOURCE_PREFIXES if include_prefix else ""
        return (
            f"{prefix}{turtle_subject('ex', self.NAMESPACE, self.local_name)} a ex:Person ;\n"
            f"    ex:firstName {turtle_string(self._first_name)} ;\n"
            f"    ex:lastName {turtle_string(self._last_name)} ;\n"
            f'    ex:birthDate "{self.birth_date_iso}"^^xsd:date .'
        )

    def to_json_ld(self) -> dict[str, Any]:
        return {
            "@context": source_context(),
            "@id": self._uri,
            "@type": "ex:Person",
            "firstName": self._first_name,
            "lastName": self._last_name,
            "birthDate": self.birth_date_iso,
        }

    def to_plain_record(self) -> dict[str, Any]:
        return {
            "uri": self._uri,
            "localName": self.local_name,
            "firstName": self._first_name,
            "lastName": self._last_name,
            "birthDate": self.birth_date_iso,
            "fullName": self.full_name,
            "age": self.age(),
        }

    @classmethod
    def from_plain_record(cls, record: dict[str, Any]) -> Person:
        """Rebuild from a plain record; derived keys (fullName, age) are ignored."""
        return cls(
            uri=record.get("uri"),
            first_name=record.get("firstName"),
            last_name=record.get("lastName"),
            birth_date=record.get("birthDate"),
        )

    @classmethod
    def from_json_ld(cls, document: dict[str, Any]) -> Person:
        return cls(
            uri=document.get("@id"),
            first_name=document.get("firstName"),
            last_name=document.get("lastName"),
            birth_date=document.get("birthDate"),
        )

    @classmethod
    def from_turtle(cls, turtle: str) -> Person:
        """Read back the exact shape written by to_turtle().

        Raises ParseError if the subject/type, firstName, lastName or
        birthDate pattern is absent.
        """
        fields = extract_fields(turtle, SOURCE_PATTERNS, shape="ex:Person")
        return cls(
            uri=f"{cls.NAMESPACE}{fields['subject']}",
            first_name=fields["firstName"],
            last_name=fields["lastName"],
            birth_date=fields["birthDate"],
        )

    # -----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Person):
            return NotImplemented
        return (
            self._uri == other._uri
            and self._first_name == other._first_name
            and self._last_name == other._last_name
            and self._birth_date == other._birth_date
        )

    __hash__ = None

    def __repr__(self) -> str:
        return f"Person(uri={self._uri!r}, birth_date={self.birth_date_iso!r})"

    def __str__(self) -> str:
        return f"Person {{ {self.full_name}, born {self.birth_date_iso}, age {self.age()} }}"


__all__ = ["Person"]
