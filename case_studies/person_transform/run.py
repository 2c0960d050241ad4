"""Person Transform — end-to-end demonstration.

Walks through the pipeline:

  raw fields -> Person (validated) -> TransformedPerson (age at a reference
  date, full name, target vocabulary) -> validate -> Turtle / JSON-LD /
  plain records -> optionally a Fuseki triple store

Scenarios 7 and 8 talk to http://localhost:3030 and are skipped when the
server does not answer a ping. Start one with: fuseki-server --mem /test

Run with:  python -m case_studies.person_transform.run [--log-level DEBUG]
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

import argparse
import json
import logging

from rdfperson.errors import TriplestoreError, ValidationError
from rdfperson.person import Person
from rdfperson.registry import create_default_registry
from rdfperson.shacl_bridge import shacl_validate
from rdfperson.transformed_person import TransformedPerson
from rdfperson.triplestore import create_local_connector

from .sample_data import REFERENCE_DATE, SAMPLE_PEOPLE, SAMPLE_QUERIES


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


# ===========================================================================
# Records
# ===========================================================================

def run_basic_person():
    print_header("1. Basic Person")
    person = Person(first_name="Jane", last_name="Doe", birth_date="2000-01-01")
    print(f"  {person}")
    print(f"  Full name: {person.full_name}")
    print(f"  Age:       {person.age()}")
    print(f"  URI:       {person.uri}")
    print("\n--- Turtle ---")
    print(person.to_turtle())
    print("\n--- Plain record ---")
    print(json.dumps(person.to_plain_record(), indent=2))


def run_transformation():
    print_header("2. Transformation")
    person = Person(first_name="John", last_name="Smith", birth_date="1985-06-15")
    print(f"  Source:      {person}")
    transformed = TransformedPerson.derive_from(person, REFERENCE_DATE)
    print(f"  Transformed: {transformed}")
    print("\n--- Transformed Turtle ---")
    print(transformed.to_turtle())


def run_validation():
    print_header("4. Validation")
    valid = Person(first_name="Valid", last_name="Person", birth_date="1990-01-01")
    print(f"  Valid person:       {valid.validate().summary()}")

    try:
        Person(first_name="Invalid", last_name="Person", birth_date="2030-01-01")
    except ValidationError as e:
        print(f"  Future birth date rejected: {e}")

    transformed = TransformedPerson(first_name="Jane", last_name="Doe", full_name="Jane Doe", age=26)
    print(f"  Transformed person: {transformed.validate().summary()}")

    hyphenated = TransformedPerson(
        first_name="Mary-Jane", last_name="Doe", full_name="Mary-Jane Doe", age=30
    )
    print("  Hyphenated name constructs, but explicit validation reports:")
    print("  " + hyphenated.validate().summary().replace("\n", "\n  "))

    print("\n" + shacl_validate([valid, transformed, hyphenated]).summary())


# ===========================================================================
# Registry
# ===========================================================================

def run_registry(registry):
    print_header("3. Registry Management")
    registry.clear_all()
    for key in ("alice_johnson", "bob_williams", "carol_brown"):
        registry.create("Person", SAMPLE_PEOPLE[key])
    print(f"  Created {len(registry.get_instances('Person'))} people")

    alice = registry.find_one("Person", lambda p: p.first_name == "Alice")
    print(f"  Found: {alice}")

    for person in registry.get_instances("Person"):
        registry.transform(person, "TransformedPerson", {"reference_date": REFERENCE_DATE})
    print(f"  Transformed {len(registry.get_instances('TransformedPerson'))} people")

    print("\n--- Statistics ---")
    print(json.dumps(registry.get_statistics(), indent=2))


def run_import_export(registry):
    print_header("5. Import / Export")
    registry.clear_all()
    registry.create("Person", first_name="Export", last_name="Test", birth_date="1995-05-15")

    exported = registry.export_to_json("Person")
    print("--- Exported JSON ---")
    print(json.dumps(exported, indent=2))
    print("\n--- Exported Turtle ---")
    print(registry.export_to_turtle("Person"))

    registry.clear_instances("Person")
    print(f"\n  Cleared instances: {len(registry.get_instances('Person'))}")
    registry.import_from_json("Person", exported["instances"])
    print(f"  Re-imported instances: {len(registry.get_instances('Person'))}")


# ===========================================================================
# Triple store
# ===========================================================================

def run_connector_setup():
    print_header("6. Fuseki Connector")
    connector = create_local_connector("test")
    print(f"  Connector:       {connector!r}")
    print(f"  Query endpoint:  {connector.query_endpoint}")
    print(f"  Update endpoint: {connector.update_endpoint}")
    print("\n--- Sample SPARQL query ---")
    print(SAMPLE_QUERIES["select_all_people"].strip())


def run_connector_operations():
    print_header("7. Fuseki Operations")
    connector = create_local_connector("test")
    if not connector.ping():
        print("  Fuseki server not reachable on http://localhost:3030; skipped")
        return

    try:
        connector.clear()
        person = Person(first_name="Fuseki", last_name="Test", birth_date="1988-08-08")
        connector.save(person)
        print(f"  Saved {person.uri}")

        retrieved = connector.get_person(person.uri)
        if retrieved:
            print(f"  Retrieved: {retrieved['firstName']} {retrieved['lastName']}")

        uris = connector.find_by_type(str(Person.RDF_TYPE))
        print(f"  Found {len(uris)} person(s) in the triple store")
    except TriplestoreError as e:
        print(f"  Error: {e}")


def run_complete_workflow(registry):
    print_header("8. Complete Workflow")
    registry.clear_all()
    for key in ("alice_johnson", "bob_williams"):
        registry.create("Person", SAMPLE_PEOPLE[key])
    print(f"  Created {len(registry.get_instances('Person'))} source people")

    for person in registry.get_instances("Person"):
        registry.transform(person, "TransformedPerson", {"reference_date": REFERENCE_DATE})
    print(f"  Transformed {len(registry.get_instances('TransformedPerson'))} people")

    results = registry.validate_all("TransformedPerson")
    all_valid = all(r.validation.valid for r in results)
    print(f"  Validation: {'all passed' if all_valid else 'some failed'}")

    exported = registry.export_to_json()
    print(f"  Exported {len(exported)} classes")

    connector = create_local_connector("test")
    if connector.ping():
        try:
            connector.clear()
            connector.save_all(registry.get_instances("Person"))
            print("  Saved all people to Fuseki")
        except TriplestoreError as e:
            print(f"  Fuseki save failed: {e}")
    else:
        print("  Fuseki operations skipped (server not available)")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Person transform demonstration")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("RDFPERSON_LOG_LEVEL", "WARNING"),
        help="Logging level (default: WARNING, or $RDFPERSON_LOG_LEVEL)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print(f"\n{'=' * 60}")
    print("  Person / TransformedPerson")
    print(f"{'=' * 60}")

    registry = create_default_registry()

    run_basic_person()
    run_transformation()
    run_registry(registry)
    run_validation()
    run_import_export(registry)
    run_connector_setup()
    run_connector_operations()
    run_complete_workflow(registry)

    print(f"\n{'=' * 60}")
    print("  Demo Complete")
    print(f"{'=' * 60}")


if __name__ == "__main__":
    main()
