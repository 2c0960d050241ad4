"""Person Transform — sample records, serialized shapes and SPARQL queries.

All expected ages are computed at REFERENCE_DATE (2026-01-10).
"""

from datetime import date


REFERENCE_DATE = date(2026, 1, 10)

# Keyword fields accepted by Person(...) / Registry.create("Person", ...)
SAMPLE_PEOPLE = {
    "jane_doe": {
        "uri": "http://example.com/ex#JaneDoe",
        "first_name": "Jane",
        "last_name": "Doe",
        "birth_date": "2000-01-01",
    },
    "john_smith": {
        "uri": "http://example.com/ex#JohnSmith",
        "first_name": "John",
        "last_name": "Smith",
        "birth_date": "1985-06-15",
    },
    "alice_johnson": {
        "uri": "http://example.com/ex#AliceJohnson",
        "first_name": "Alice",
        "last_name": "Johnson",
        "birth_date": "1992-03-22",
    },
    "bob_williams": {
        "uri": "http://example.com/ex#BobWilliams",
        "first_name": "Bob",
        "last_name": "Williams",
        "birth_date": "1978-11-30",
    },
    "carol_brown": {
        "uri": "http://example.com/ex#CarolBrown",
        "first_name": "Carol",
        "last_name": "Brown",
        "birth_date": "2005-07-04",
    },
}

EXPECTED_AGES = {
    "jane_doe": 26,
    "john_smith": 40,
    "alice_johnson": 33,
    "bob_williams": 47,
    "carol_brown": 20,
}

SAMPLE_TRANSFORMED = {
    "jane_doe": {
        "uri": "http://example.com/ns/Person#JaneDoe",
        "first_name": "Jane",
        "last_name": "Doe",
        "full_name": "Jane Doe",
        "age": 26,
    },
    "john_smith": {
        "uri": "http://example.com/ns/Person#JohnSmith",
        "first_name": "John",
        "last_name": "Smith",
        "full_name": "John Smith",
        "age": 40,
    },
    "alice_johnson": {
        "uri": "http://example.com/ns/Person#AliceJohnson",
        "first_name": "Alice",
        "last_name": "Johnson",
        "full_name": "Alice Johnson",
        "age": 33,
    },
}

PERSON_TURTLE = """@prefix ex: <http://example.com/ex#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

ex:JaneDoe a ex:Person ;
    ex:firstName "Jane" ;
    ex:lastName "Doe" ;
    ex:birthDate "2000-01-01"^^xsd:date ."""

TRANSFORMED_TURTLE = """@prefix Person: <http://example.com/ns/Person#> .
@prefix Class: <http://example.com/ns/Class#> .
@prefix ex: <http://example.com/ex#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

Person:JaneDoe a Class:Person ;
    ex:firstName "Jane" ;
    ex:lastName "Doe" ;
    Person:fullName "Jane Doe" ;
    Person:age 26 ."""

MULTIPLE_PEOPLE_TURTLE = """@prefix ex: <http://example.com/ex#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

ex:JaneDoe a ex:Person ;
    ex:firstName "Jane" ;
    ex:lastName "Doe" ;
    ex:birthDate "2000-01-01"^^xsd:date .

ex:JohnSmith a ex:Person ;
    ex:firstName "John" ;
    ex:lastName "Smith" ;
    ex:birthDate "1985-06-15"^^xsd:date ."""

PERSON_JSON_LD = {
    "@context": {
        "ex": "http://example.com/ex#",
        "xsd": "http://www.w3.org/2001/XMLSchema#",
        "firstName": "ex:firstName",
        "lastName": "ex:lastName",
        "birthDate": {"@id": "ex:birthDate", "@type": "xsd:date"},
    },
    "@id": "http://example.com/ex#JaneDoe",
    "@type": "ex:Person",
    "firstName": "Jane",
    "lastName": "Doe",
    "birthDate": "2000-01-01",
}

TRANSFORMED_JSON_LD = {
    "@context": {
        "Person": "http://example.com/ns/Person#",
        "Class": "http://example.com/ns/Class#",
        "ex": "http://example.com/ex#",
        "xsd": "http://www.w3.org/2001/XMLSchema#",
        "firstName": "ex:firstName",
        "lastName": "ex:lastName",
        "fullName": "Person:fullName",
        "age": {"@id": "Person:age", "@type": "xsd:integer"},
    },
    "@id": "http://example.com/ns/Person#JaneDoe",
    "@type": "Class:Person",
    "firstName": "Jane",
    "lastName": "Doe",
    "fullName": "Jane Doe",
    "age": 26,
}

INVALID_PEOPLE = {
    "missing_first_name": {"last_name": "Doe", "birth_date": "2000-01-01"},
    "missing_last_name": {"first_name": "Jane", "birth_date": "2000-01-01"},
    "missing_birth_date": {"first_name": "Jane", "last_name": "Doe"},
    "future_birth_date": {"first_name": "Jane", "last_name": "Doe", "birth_date": "2030-01-01"},
    "empty_first_name": {"first_name": "", "last_name": "Doe", "birth_date": "2000-01-01"},
    "invalid_birth_date": {"first_name": "Jane", "last_name": "Doe", "birth_date": "not-a-date"},
}

INVALID_TRANSFORMED = {
    "negative_age": {"first_name": "Jane", "last_name": "Doe", "full_name": "Jane Doe", "age": -5},
    "age_out_of_range": {"first_name": "Jane", "last_name": "Doe", "full_name": "Jane Doe", "age": 200},
    "mismatched_full_name": {
        "first_name": "Jane", "last_name": "Doe", "full_name": "John Smith", "age": 26,
    },
}

SAMPLE_QUERIES = {
    "select_all_people": """
PREFIX ex: <http://example.com/ex#>
SELECT ?person ?firstName ?lastName ?birthDate
WHERE {
  ?person a ex:Person ;
          ex:firstName ?firstName ;
          ex:lastName ?lastName ;
          ex:birthDate ?birthDate .
}""",
    "select_all_transformed_people": """
PREFIX Person: <http://example.com/ns/Person#>
PREFIX Class: <http://example.com/ns/Class#>
PREFIX ex: <http://example.com/ex#>
SELECT ?person ?firstName ?lastName ?fullName ?age
WHERE {
  ?person a Class:Person ;
          ex:firstName ?firstName ;
          ex:lastName ?lastName ;
          Person:fullName ?fullName ;
          Person:age ?age .
}""",
    "ask_person_exists": """
PREFIX ex: <http://example.com/ex#>
ASK { ex:JaneDoe a ex:Person . }""",
    "delete_person": """
PREFIX ex: <http://example.com/ex#>
DELETE WHERE { ex:JaneDoe ?p ?o . }""",
    "update_person_name": """
PREFIX ex: <http://example.com/ex#>
DELETE { ex:JaneDoe ex:firstName ?old . }
INSERT { ex:JaneDoe ex:firstName "Janet" . }
WHERE  { ex:JaneDoe ex:firstName ?old . }""",
}
