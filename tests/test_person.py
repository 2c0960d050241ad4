"""Tests for Person: construction, setters, age computation and serialization."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, datetime, timedelta, timezone

import pytest
from rdflib import Graph, Literal, RDF, URIRef
from rdflib.namespace import XSD

from rdfperson.errors import ParseError, ValidationError
from rdfperson.person import Person
from rdfperson.types import EX

from case_studies.person_transform.sample_data import (
    EXPECTED_AGES,
    INVALID_PEOPLE,
    MULTIPLE_PEOPLE_TURTLE,
    PERSON_JSON_LD,
    PERSON_TURTLE,
    REFERENCE_DATE,
    SAMPLE_PEOPLE,
)


@pytest.fixture
def jane():
    return Person(**SAMPLE_PEOPLE["jane_doe"])


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_valid_fields(self, jane):
        assert jane.first_name == "Jane"
        assert jane.last_name == "Doe"
        assert jane.birth_date == date(2000, 1, 1)
        assert jane.birth_date_iso == "2000-01-01"

    def test_names_are_trimmed(self):
        person = Person(first_name="  Jane ", last_name=" Doe\t", birth_date="2000-01-01")
        assert person.first_name == "Jane"
        assert person.last_name == "Doe"

    def test_uri_generated_from_names(self):
        person = Person(first_name="Test", last_name="User", birth_date="1990-01-01")
        assert person.uri == "http://example.com/ex#TestUser"
        assert person.local_name == "TestUser"

    def test_generated_uri_strips_inner_whitespace(self):
        person = Person(first_name="Mary Ann", last_name="van Dyke", birth_date="1990-01-01")
        assert person.uri == "http://example.com/ex#MaryAnnvanDyke"

    def test_identical_names_collide(self):
        a = Person(first_name="Jane", last_name="Doe", birth_date="2000-01-01")
        b = Person(first_name="Jane", last_name="Doe", birth_date="1970-05-05")
        assert a.uri == b.uri

    def test_explicit_uri_kept(self):
        person = Person(uri="http://example.com/ex#custom", first_name="A", last_name="B",
                        birth_date="2000-01-01")
        assert person.uri == "http://example.com/ex#custom"

    def test_accepts_date_and_datetime(self):
        d = Person(first_name="A", last_name="B", birth_date=date(1999, 12, 31))
        dt = Person(first_name="A", last_name="B",
                    birth_date=datetime(1999, 12, 31, 12, 0, tzinfo=timezone.utc))
        assert d.birth_date == dt.birth_date == date(1999, 12, 31)

    def test_accepts_iso_datetime_string(self):
        person = Person(first_name="A", last_name="B", birth_date="1999-12-31T08:00:00+00:00")
        assert person.birth_date == date(1999, 12, 31)

    def test_datetime_keeps_its_own_calendar_date(self):
        east = timezone(timedelta(hours=14))
        person = Person(first_name="A", last_name="B",
                        birth_date=datetime(2000, 1, 1, 0, 30, tzinfo=east))
        assert person.birth_date == date(2000, 1, 1)

    def test_naive_datetime_keeps_its_calendar_date(self):
        person = Person(first_name="A", last_name="B", birth_date=datetime(1999, 12, 31, 23, 30))
        assert person.birth_date == date(1999, 12, 31)

    def test_generated_uri_encodes_quotes(self):
        person = Person(first_name='Jo "JJ"', last_name="Doe", birth_date="2000-01-01")
        assert person.uri == "http://example.com/ex#Jo%22JJ%22Doe"

    @pytest.mark.parametrize("key", sorted(INVALID_PEOPLE))
    def test_invalid_data_rejected(self, key):
        with pytest.raises(ValidationError):
            Person(**INVALID_PEOPLE[key])

    def test_future_birth_date_rejected(self):
        with pytest.raises(ValidationError, match="in the past"):
            Person(first_name="Jane", last_name="Doe", birth_date="2030-01-01")

    def test_future_datetime_rejected(self):
        soon = datetime.now(timezone.utc) + timedelta(hours=1)
        with pytest.raises(ValidationError):
            Person(first_name="Jane", last_name="Doe", birth_date=soon)

    def test_recent_past_accepted(self):
        recent = date.today() - timedelta(days=2)
        person = Person(first_name="New", last_name="Born", birth_date=recent)
        assert person.age(date.today()) == 0

    def test_whitespace_only_name_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Person(first_name="   ", last_name="Doe", birth_date="2000-01-01")
        assert exc_info.value.field == "firstName"

    def test_non_string_name_rejected(self):
        with pytest.raises(ValidationError):
            Person(first_name=123, last_name="Doe", birth_date="2000-01-01")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Person(first_name="Jane", last_name="Doe", birth_date="not-a-date")


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------

class TestDerivedValues:
    def test_full_name(self, jane):
        assert jane.full_name == "Jane Doe"

    @pytest.mark.parametrize("key", sorted(SAMPLE_PEOPLE))
    def test_expected_ages(self, key):
        person = Person(**SAMPLE_PEOPLE[key])
        assert person.age(REFERENCE_DATE) == EXPECTED_AGES[key]

    def test_birthday_already_passed(self, jane):
        assert jane.age(date(2026, 1, 10)) == 26

    def test_birthday_not_yet_reached(self, jane):
        assert jane.age(date(2025, 12, 31)) == 25

    def test_on_birthday(self):
        person = Person(first_name="A", last_name="B", birth_date="1990-06-15")
        assert person.age(date(2020, 6, 15)) == 30
        assert person.age(date(2020, 6, 14)) == 29

    def test_leap_day_birthday(self):
        person = Person(first_name="Leap", last_name="Year", birth_date="2004-02-29")
        assert person.age(date(2025, 2, 28)) == 20
        assert person.age(date(2025, 3, 1)) == 21

    def test_reference_date_as_string_or_datetime(self, jane):
        assert jane.age("2026-01-10") == 26
        assert jane.age(datetime(2025, 12, 31, 23, 59)) == 25

    def test_default_reference_is_today(self, jane):
        assert jane.age() == jane.age(date.today())

    @pytest.mark.parametrize("reference", ["not-a-date", 42])
    def test_bad_reference_date(self, jane, reference):
        with pytest.raises(ValidationError) as exc_info:
            jane.age(reference)
        assert exc_info.value.field == "referenceDate"


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------

class TestMutation:
    def test_set_first_name(self, jane):
        jane.first_name = "Janet"
        assert jane.first_name == "Janet"
        assert jane.full_name == "Janet Doe"

    def test_set_last_name(self, jane):
        jane.last_name = "Smith"
        assert jane.full_name == "Jane Smith"

    def test_rejected_name_leaves_record_unchanged(self, jane):
        with pytest.raises(ValidationError):
            jane.first_name = "  "
        assert jane.first_name == "Jane"

    def test_set_birth_date(self, jane):
        jane.birth_date = "1999-02-03"
        assert jane.birth_date == date(1999, 2, 3)

    def test_future_birth_date_setter_rejected(self, jane):
        with pytest.raises(ValidationError):
            jane.birth_date = "2030-01-01"
        assert jane.birth_date == date(2000, 1, 1)

    def test_uri_is_read_only(self, jane):
        with pytest.raises(AttributeError):
            jane.uri = "http://example.com/ex#Other"

    def test_evolve_returns_new_record(self, jane):
        janet = jane.evolve(first_name="Janet")
        assert janet.first_name == "Janet"
        assert janet.uri == jane.uri
        assert jane.first_name == "Jane"

    def test_evolve_validates(self, jane):
        with pytest.raises(ValidationError):
            jane.evolve(birth_date="2030-01-01")


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------

class TestValidate:
    def test_valid_record(self, jane):
        result = jane.validate()
        assert result.valid
        assert result.errors == []

    def test_reports_all_errors_without_raising(self, jane):
        # Bypass the setters to simulate corrupted state
        jane._first_name = ""
        jane._last_name = ""
        jane._birth_date = date.today() + timedelta(days=400)
        result = jane.validate()
        assert not result.valid
        assert len(result.errors) == 3
        assert any("birthDate" in e for e in result.errors)

    def test_missing_birth_date_reported(self, jane):
        jane._birth_date = None
        result = jane.validate()
        assert result.errors == ["birthDate is required"]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

class TestSerialization:
    def test_turtle_matches_fixed_shape(self, jane):
        assert jane.to_turtle() == PERSON_TURTLE

    def test_turtle_without_prefix(self, jane):
        turtle = jane.to_turtle(include_prefix=False)
        assert not turtle.startswith("@prefix")
        assert turtle.startswith("ex:JaneDoe a ex:Person ;")

    def test_turtle_is_valid_rdf(self, jane):
        g = Graph()
        g.parse(data=jane.to_turtle(), format="turtle")
        assert (EX.JaneDoe, RDF.type, EX.Person) in g
        assert g.value(EX.JaneDoe, EX.birthDate) == Literal("2000-01-01", datatype=XSD.date)
        assert len(g) == 4

    def test_json_ld(self, jane):
        assert jane.to_json_ld() == PERSON_JSON_LD

    def test_plain_record(self, jane):
        record = jane.to_plain_record()
        assert record["uri"] == "http://example.com/ex#JaneDoe"
        assert record["localName"] == "JaneDoe"
        assert record["birthDate"] == "2000-01-01"
        assert record["fullName"] == "Jane Doe"
        assert record["age"] == jane.age()

    @pytest.mark.parametrize("key", sorted(SAMPLE_PEOPLE))
    def test_plain_record_round_trip(self, key):
        person = Person(**SAMPLE_PEOPLE[key])
        assert Person.from_plain_record(person.to_plain_record()) == person

    def test_from_json_ld(self):
        person = Person.from_json_ld(PERSON_JSON_LD)
        assert person.uri == "http://example.com/ex#JaneDoe"
        assert person.full_name == "Jane Doe"

    def test_from_turtle(self):
        person = Person.from_turtle(PERSON_TURTLE)
        assert person.uri == "http://example.com/ex#JaneDoe"
        assert person.birth_date_iso == "2000-01-01"

    def test_from_turtle_reads_first_subject(self):
        person = Person.from_turtle(MULTIPLE_PEOPLE_TURTLE)
        assert person.first_name == "Jane"

    def test_from_turtle_missing_pattern(self):
        broken = PERSON_TURTLE.replace('ex:birthDate "2000-01-01"^^xsd:date', "")
        with pytest.raises(ParseError) as exc_info:
            Person.from_turtle(broken)
        assert exc_info.value.missing == ["birthDate"]

    def test_from_turtle_wrong_shape(self):
        with pytest.raises(ParseError) as exc_info:
            Person.from_turtle("<http://x> <http://y> <http://z> .")
        assert set(exc_info.value.missing) == {"subject", "firstName", "lastName", "birthDate"}

    def test_from_turtle_still_validates(self):
        future = PERSON_TURTLE.replace("2000-01-01", "2030-01-01")
        with pytest.raises(ValidationError):
            Person.from_turtle(future)

    @pytest.mark.parametrize("first_name, last_name", [
        ("Mary-Jane", "Doe"),
        ('Jo "JJ"', "Doe"),
        ("Sean", "O'Brien"),
        ("Back\\slash", "Doe"),
    ])
    def test_unusual_names_round_trip(self, first_name, last_name):
        person = Person(first_name=first_name, last_name=last_name, birth_date="2000-01-01")
        turtle = person.to_turtle()

        g = Graph()
        g.parse(data=turtle, format="turtle")
        assert (URIRef(person.uri), RDF.type, EX.Person) in g
        assert g.value(URIRef(person.uri), EX.firstName) == Literal(first_name)

        assert Person.from_turtle(turtle) == person

    def test_str(self, jane):
        assert str(jane).startswith("Person { Jane Doe, born 2000-01-01, age ")
