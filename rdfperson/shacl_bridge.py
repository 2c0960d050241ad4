"""SHACL Bridge — the informal record rules as executable SHACL shapes.

The record classes check their rules in Python. This module states the same
rules as a SHACL shapes graph so that any RDF data (records in memory, or
Turtle pulled back from a triple store) can be checked with pySHACL:

  ex:PersonShape      (target ex:Person)
    ex:firstName      literal, exactly one, minLength 1
    ex:lastName       literal, exactly one, minLength 1
    ex:birthDate      xsd:date, exactly one

  Class:PersonShape   (target Class:Person)
    ex:firstName      literal, exactly one, minLength 1
    ex:lastName       literal, exactly one, minLength 1
    Person:fullName   literal, exactly one, minLength 3,
                      pattern ^[A-Za-z]+ [A-Za-z]+$
    Person:age        xsd:integer, exactly one, 0..150

Rules that need more than one value at once (fullName consistency with the
name parts, birthDate not in the future) stay in the record classes'
validate(); they are added to the shapes only as rdfs:comment notes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from rdflib import BNode, Graph, Literal, RDF, RDFS, URIRef, XSD
from rdflib.namespace import SH

from .person import Person
from .transformed_person import MAX_AGE, MIN_AGE, TransformedPerson
from .types import CLASS, EX, PERSON


FULL_NAME_PATTERN = "^[A-Za-z]+ [A-Za-z]+$"


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

def _property(
    sg: Graph,
    shape: URIRef,
    path: URIRef,
    *,
    datatype: URIRef | None = None,
    min_length: int | None = None,
    pattern: str | None = None,
    min_inclusive: int | None = None,
    max_inclusive: int | None = None,
) -> BNode:
    prop = BNode()
    sg.add((shape, SH.property, prop))
    sg.add((prop, SH.path, path))
    sg.add((prop, SH.minCount, Literal(1)))
    sg.add((prop, SH.maxCount, Literal(1)))
    if datatype is not None:
        sg.add((prop, SH.datatype, datatype))
    else:
        sg.add((prop, SH.nodeKind, SH.Literal))
    if min_length is not None:
        sg.add((prop, SH.minLength, Literal(min_length)))
    if pattern is not None:
        sg.add((prop, SH.pattern, Literal(pattern)))
    if min_inclusive is not None:
        sg.add((prop, SH.minInclusive, Literal(min_inclusive)))
    if max_inclusive is not None:
        sg.add((prop, SH.maxInclusive, Literal(max_inclusive)))
    return prop


def person_shapes() -> Graph:
    """Build the shapes graph for ex:Person and Class:Person."""
    sg = Graph()
    sg.bind("sh", SH)
    sg.bind("ex", EX)
    sg.bind("Person", PERSON)
    sg.bind("Class", CLASS)
    sg.bind("xsd", XSD)

    source = EX["PersonShape"]
    sg.add((source, RDF.type, SH.NodeShape))
    sg.add((source, SH.targetClass, EX.Person))
    sg.add((source, RDFS.label, Literal("Shape for ex:Person")))
    _property(sg, source, EX.firstName, min_length=1)
    _property(sg, source, EX.lastName, min_length=1)
    _property(sg, source, EX.birthDate, datatype=XSD.date)
    sg.add((source, RDFS.comment, Literal("birthDate must not be in the future")))

    target = CLASS["PersonShape"]
    sg.add((target, RDF.type, SH.NodeShape))
    sg.add((target, SH.targetClass, CLASS.Person))
    sg.add((target, RDFS.label, Literal("Shape for Class:Person")))
    _property(sg, target, EX.firstName, min_length=1)
    _property(sg, target, EX.lastName, min_length=1)
    _property(sg, target, PERSON.fullName, min_length=3, pattern=FULL_NAME_PATTERN)
    _property(
        sg, target, PERSON.age,
        datatype=XSD.integer, min_inclusive=MIN_AGE, max_inclusive=MAX_AGE,
    )
    sg.add((target, RDFS.comment, Literal('fullName must equal "firstName lastName"')))

    return sg


# ---------------------------------------------------------------------------
# Records → RDF data graph
# ---------------------------------------------------------------------------

def records_to_rdf(records: Iterable[Person | TransformedPerson]) -> Graph:
    """Translate records into an RDF data graph, one resource per record."""
    dg = Graph()
    dg.bind("ex", EX)
    dg.bind("Person", PERSON)
    dg.bind("Class", CLASS)

    for record in records:
        uri = URIRef(record.uri)
        if isinstance(record, TransformedPerson):
            dg.add((uri, RDF.type, CLASS.Person))
            dg.add((uri, EX.firstName, Literal(record.first_name, datatype=XSD.string)))
            dg.add((uri, EX.lastName, Literal(record.last_name, datatype=XSD.string)))
            dg.add((uri, PERSON.fullName, Literal(record.full_name, datatype=XSD.string)))
            dg.add((uri, PERSON.age, Literal(int(record.age), datatype=XSD.integer)))
        elif isinstance(record, Person):
            dg.add((uri, RDF.type, EX.Person))
            dg.add((uri, EX.firstName, Literal(record.first_name, datatype=XSD.string)))
            dg.add((uri, EX.lastName, Literal(record.last_name, datatype=XSD.string)))
            dg.add((uri, EX.birthDate, Literal(record.birth_date_iso, datatype=XSD.date)))
        else:
            raise TypeError(f"Cannot translate {type(record).__name__} to RDF")

    return dg


# ---------------------------------------------------------------------------
# SHACL Validation
# ---------------------------------------------------------------------------

def shacl_validate_graph(data_graph: Graph) -> SHACLValidationResult:
    """Validate an arbitrary data graph against person_shapes()."""
    from pyshacl import validate as pyshacl_validate

    shapes_graph = person_shapes()

    conforms, results_graph, results_text = pyshacl_validate(
        data_graph,
        shacl_graph=shapes_graph,
        inference="none",
        abort_on_first=False,
    )

    violations = []
    for result in results_graph.subjects(RDF.type, SH.ValidationResult):
        focus = results_graph.value(result, SH.focusNode)
        path = results_graph.value(result, SH.resultPath)
        message = results_graph.value(result, SH.resultMessage)
        severity = results_graph.value(result, SH.resultSeverity)

        violations.append(SHACLViolation(
            focus_node=str(focus) if focus else "",
            path=str(path) if path else "",
            message=str(message) if message else "",
            severity=str(severity) if severity else "",
        ))

    return SHACLValidationResult(
        conforms=conforms,
        violations=violations,
        results_text=results_text,
        shapes_graph=shapes_graph,
        data_graph=data_graph,
    )


def shacl_validate(records: Iterable[Person | TransformedPerson]) -> SHACLValidationResult:
    """Translate records to RDF and validate them against the person shapes."""
    return shacl_validate_graph(records_to_rdf(records))


def shacl_validate_turtle(turtle: str) -> SHACLValidationResult:
    """Parse Turtle (e.g. retrieved from a triple store) and validate it."""
    data_graph = Graph()
    data_graph.parse(data=turtle, format="turtle")
    return shacl_validate_graph(data_graph)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

def _short(uri: str) -> str:
    return uri.rsplit("#", 1)[-1] if "#" in uri else uri.rsplit("/", 1)[-1]


@dataclass
class SHACLViolation:
    """A single SHACL validation violation."""
    focus_node: str
    path: str
    message: str
    severity: str

    def __repr__(self) -> str:
        return f"SHACLViolation({_short(self.focus_node)}.{_short(self.path)}: {self.message})"


@dataclass
class SHACLValidationResult:
    """Result of validating a data graph against person_shapes()."""
    conforms: bool
    violations: list[SHACLViolation] = field(default_factory=list)
    results_text: str = ""
    shapes_graph: Graph | None = None
    data_graph: Graph | None = None

    def summary(self) -> str:
        lines = []
        status = "CONFORMS" if self.conforms else "DOES NOT CONFORM"
        lines.append(f"SHACL Validation: {status}")
        lines.append("-" * 50)
        if self.violations:
            lines.append(f"  Violations ({len(self.violations)}):")
            for v in self.violations:
                lines.append(f"    - {_short(v.focus_node)}.{_short(v.path)}: {v.message}")
        else:
            lines.append("  No violations found.")
        return "\n".join(lines)

    def shapes_as_turtle(self) -> str:
        """Serialize the SHACL shapes graph as Turtle for inspection."""
        if self.shapes_graph is None:
            return ""
        return self.shapes_graph.serialize(format="turtle")

    def data_as_turtle(self) -> str:
        """Serialize the RDF data graph as Turtle for inspection."""
        if self.data_graph is None:
            return ""
        return self.data_graph.serialize(format="turtle")
