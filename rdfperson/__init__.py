"""rdfperson — Person records across two RDF vocabularies.

A source record (Person, typed ex:Person) is transformed into a derived
record (TransformedPerson, typed Class:Person) that carries a computed age
and a redundant full name. Both are checked at every boundary:

- Person:              validated construction and setters, age(reference_date)
- TransformedPerson:   full-name consistency, age range, derive_from(person)
- Registry:            explicit catalog of classes and live instances with bulk
                       create / transform / validate / export / import
- Formats:             fixed-shape Turtle and JSON-LD read/write (not a parser)
- SHACL Bridge:        the same rules as SHACL shapes, checked with pySHACL
- Triplestore:         FusekiConnector over the SPARQL and Graph Store protocols

The record modules never perform I/O; only rdfperson.triplestore talks to
the network. Requires rdflib and pyshacl for the SHACL bridge, requests for
the connector.
"""
