"""Registry — in-memory catalog of record classes and their live instances.

Each entry maps a logical class name to:
  - a factory (usually the class itself, called with keyword fields)
  - the RDF type URI and namespace label
  - an optional transformer producing instances of this class
  - an optional validator
  - a loader used by import_from_json (defaults to factory.from_plain_record)
  - the insertion-ordered list of instances

A Registry is an explicit context object: create as many as needed.
create_default_registry() returns one with Person and TransformedPerson
already registered. Instance lists are only ever handed out as copies.

Access is assumed to be single-threaded; no locking is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .errors import ConfigError, UnregisteredClassError
from .person import Person
from .transformed_person import TransformedPerson
from .types import (
    CLASS,
    EX,
    PlainRecordSerializable,
    TurtleSerializable,
    Validatable,
    ValidationResult,
)

logger = logging.getLogger(__name__)

Factory = Callable[..., Any]
Transformer = Callable[[Any, dict[str, Any]], Any]
Validator = Callable[[Any], ValidationResult]
Loader = Callable[[dict[str, Any]], Any]


# ---------------------------------------------------------------------------
# Entries and results
# ---------------------------------------------------------------------------

@dataclass
class RegisteredClass:
    """Metadata and live instances for one registered class name."""
    name: str
    factory: Factory
    rdf_type: str | None = None
    namespace: str | None = None
    transformer: Transformer | None = None
    validator: Validator | None = None
    loader: Loader | None = None
    instances: list[Any] = field(default_factory=list)

    def metadata(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rdfType": self.rdf_type,
            "namespace": self.namespace,
            "instanceCount": len(self.instances),
            "hasTransformer": self.transformer is not None,
            "hasValidator": self.validator is not None,
        }

    def __repr__(self) -> str:
        return f"RegisteredClass({self.name}: {len(self.instances)} instances)"


@dataclass
class InstanceValidation:
    """One row of validate_all(): the instance and its report."""
    instance: Any
    validation: ValidationResult


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class Registry:
    """Class catalog plus instance tracker."""

    def __init__(self) -> None:
        self._entries: dict[str, RegisteredClass] = {}

    # -----------------------------------------------------------------------
    # Registration
    # -----------------------------------------------------------------------

    def register_class(
        self,
        name: str,
        factory: Factory,
        *,
        rdf_type: str | None = None,
        namespace: str | None = None,
        transformer: Transformer | None = None,
        validator: Validator | None = None,
        loader: Loader | None = None,
    ) -> RegisteredClass:
        """Register `factory` under `name`. Raises ConfigError on a duplicate name."""
        if name in self._entries:
            raise ConfigError(f'Class "{name}" is already registered')

        if loader is None:
            loader = getattr(factory, "from_plain_record", None)

        entry = RegisteredClass(
            name=name,
            factory=factory,
            rdf_type=str(rdf_type) if rdf_type is not None else None,
            namespace=namespace,
            transformer=transformer,
            validator=validator,
            loader=loader,
        )
        self._entries[name] = entry
        logger.debug("Registered class %s (rdf_type=%s)", name, entry.rdf_type)
        return entry

    def _entry(self, name: str) -> RegisteredClass:
        entry = self._entries.get(name)
        if entry is None:
            raise UnregisteredClassError(name)
        return entry

    def get_class(self, name: str) -> Factory:
        return self._entry(name).factory

    def get_registered_classes(self) -> list[str]:
        return list(self._entries)

    def get_class_metadata(self, name: str) -> dict[str, Any]:
        return self._entry(name).metadata()

    def is_registered(self, name: str) -> bool:
        return name in self._entries

    # -----------------------------------------------------------------------
    # Instances
    # -----------------------------------------------------------------------

    def create(self, name: str, fields: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        """Construct through the registered factory and track the result.

        Factory errors (e.g. ValidationError) propagate unchanged and
        nothing is tracked.
        """
        entry = self._entry(name)
        data = dict(fields or {})
        data.update(kwargs)
        instance = entry.factory(**data)
        entry.instances.append(instance)
        logger.debug("Created %s instance %r", name, instance)
        return instance

    def get_instances(self, name: str) -> list[Any]:
        return list(self._entry(name).instances)

    def transform(self, instance: Any, target_name: str, options: dict[str, Any] | None = None) -> Any:
        """Run the transformer registered for `target_name` on `instance`.

        The result is tracked under `target_name` when that class is
        registered (a transformer is only ever stored on a registered
        entry, so in practice it always is).
        """
        entry = self._entries.get(target_name)
        if entry is None or entry.transformer is None:
            raise UnregisteredClassError(
                target_name, f'No transformer registered for "{target_name}"'
            )
        transformed = entry.transformer(instance, dict(options or {}))
        entry.instances.append(transformed)
        logger.debug("Transformed %r into %s", instance, target_name)
        return transformed

    def add_instance(self, name: str, instance: Any) -> Any:
        """Track an instance that was built outside the registry."""
        self._entry(name).instances.append(instance)
        return instance

    def remove_instance(self, name: str, instance: Any) -> bool:
        instances = self._entry(name).instances
        for i, tracked in enumerate(instances):
            if tracked is instance:
                del instances[i]
                return True
        return False

    def clear_instances(self, name: str) -> None:
        entry = self._entries.get(name)
        if entry is not None:
            entry.instances.clear()

    def clear_all(self) -> None:
        for entry in self._entries.values():
            entry.instances.clear()

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    def validate_instance(self, name: str, instance: Any) -> ValidationResult:
        """Validate with, in order of preference: the registered validator,
        the instance's own validate(), or nothing at all.

        The last case reports valid: an instance with no validation
        capability is accepted as-is.
        """
        entry = self._entries.get(name)
        if entry is not None and entry.validator is not None:
            return entry.validator(instance)
        if isinstance(instance, Validatable):
            return instance.validate()
        return ValidationResult(valid=True, errors=[])

    def validate_all(self, name: str) -> list[InstanceValidation]:
        return [
            InstanceValidation(instance=inst, validation=self.validate_instance(name, inst))
            for inst in self.get_instances(name)
        ]

    # -----------------------------------------------------------------------
    # Lookup
    # -----------------------------------------------------------------------

    def find(self, name: str, predicate: Callable[[Any], bool]) -> list[Any]:
        return [inst for inst in self.get_instances(name) if predicate(inst)]

    def find_one(self, name: str, predicate: Callable[[Any], bool]) -> Any | None:
        for inst in self.get_instances(name):
            if predicate(inst):
                return inst
        return None

    def find_by_uri(self, name: str, uri: str) -> Any | None:
        return self.find_one(name, lambda inst: getattr(inst, "uri", None) == uri)

    # -----------------------------------------------------------------------
    # Export / import
    # -----------------------------------------------------------------------

    @staticmethod
    def _plain(instance: Any) -> Any:
        if isinstance(instance, PlainRecordSerializable):
            return instance.to_plain_record()
        return instance

    def export_to_json(self, name: str | None = None) -> dict[str, Any]:
        """Plain records for one class ({"class", "instances"}) or for all classes."""
        if name is not None:
            return {
                "class": name,
                "instances": [self._plain(inst) for inst in self.get_instances(name)],
            }
        return {
            entry_name: [self._plain(inst) for inst in entry.instances]
            for entry_name, entry in self._entries.items()
        }

    def export_to_turtle(self, name: str | None = None) -> str:
        """Turtle for one class or for every class.

        The first record written for each class carries that class's prefix
        block; later records of the same class omit it.
        """
        names = [name] if name is not None else list(self._entries)

        parts: list[str] = []
        for entry_name in names:
            first = True
            for inst in self.get_instances(entry_name):
                if not isinstance(inst, TurtleSerializable):
                    logger.warning("Skipping %r in Turtle export: no to_turtle()", inst)
                    continue
                parts.append(inst.to_turtle(first))
                first = False
        return "\n\n".join(parts)

    def import_from_json(self, name: str, records: Iterable[dict[str, Any]]) -> list[Any]:
        """Rebuild instances from plain records and track them.

        Uses the registered loader, falling back to calling the factory
        with the record as keyword fields.
        """
        entry = self._entry(name)
        created = []
        for record in records:
            if entry.loader is not None:
                instance = entry.loader(record)
            else:
                instance = entry.factory(**record)
            entry.instances.append(instance)
            created.append(instance)
        logger.debug("Imported %d %s instances", len(created), name)
        return created

    # -----------------------------------------------------------------------
    # Statistics
    # -----------------------------------------------------------------------

    def get_statistics(self) -> dict[str, Any]:
        classes = {
            entry_name: {"count": len(entry.instances), "metadata": entry.metadata()}
            for entry_name, entry in self._entries.items()
        }
        return {
            "totalClasses": len(self._entries),
            "totalInstances": sum(c["count"] for c in classes.values()),
            "classes": classes,
        }

    def __repr__(self) -> str:
        return (
            f"Registry({len(self._entries)} classes, "
            f"{sum(len(e.instances) for e in self._entries.values())} instances)"
        )


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------

_TRANSFORM_OPTIONS = {"reference_date", "referenceDate", "strict"}


def _person_to_transformed(person: Person, options: dict[str, Any]) -> TransformedPerson:
    """Options: reference_date (or referenceDate) and strict.

    An unknown key raises TypeError rather than being ignored.
    """
    unknown = sorted(set(options) - _TRANSFORM_OPTIONS)
    if unknown:
        raise TypeError(
            f"Unknown transform option(s) {', '.join(unknown)}; "
            f"expected {', '.join(sorted(_TRANSFORM_OPTIONS))}"
        )
    if "reference_date" in options and "referenceDate" in options:
        raise TypeError("Pass either reference_date or referenceDate, not both")
    reference_date = options.get("reference_date", options.get("referenceDate"))
    return TransformedPerson.from_person(
        person,
        reference_date,
        strict=options.get("strict", False),
    )


def create_default_registry() -> Registry:
    """A fresh registry with Person and TransformedPerson registered."""
    registry = Registry()
    registry.register_class(
        "Person",
        Person,
        rdf_type=EX.Person,
        namespace="ex",
    )
    registry.register_class(
        "TransformedPerson",
        TransformedPerson,
        rdf_type=CLASS.Person,
        namespace="Person",
        transformer=_person_to_transformed,
    )
    return registry
