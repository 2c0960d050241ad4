"""Triple store access over the SPARQL 1.1 Protocol and Graph Store Protocol.

The record and registry modules never talk HTTP. They only need something
that satisfies TriplestoreClient; FusekiConnector is the implementation for
Apache Jena Fuseki, built on requests.

Endpoints for dataset `ds` on `base_url`:

  query   POST {base_url}/{ds}/query     SELECT / CONSTRUCT / ASK
  update  POST {base_url}/{ds}/update    SPARQL Update
  data    {base_url}/{ds}/data?default   or  ?graph=<encoded IRI>
  admin   {base_url}/$/ping, /$/datasets, /$/stats/{ds}

No retries are attempted: every HTTP failure surfaces as a TriplestoreError.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, runtime_checkable
from urllib.parse import quote

import requests

from .errors import ConfigError, TriplestoreError
from .types import CLASS, EX, PERSON, XSD, TurtleSerializable

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"
TURTLE = "text/turtle"


# ---------------------------------------------------------------------------
# Capability
# ---------------------------------------------------------------------------

@runtime_checkable
class TriplestoreClient(Protocol):
    """What the rest of the package needs from a triple store."""

    def query(self, sparql: str) -> dict[str, Any]: ...

    def construct(self, sparql: str, format: str = TURTLE) -> str: ...

    def ask(self, sparql: str) -> bool: ...

    def update(self, sparql: str) -> None: ...

    def insert(self, data: str, content_type: str = TURTLE, graph: str | None = None) -> None: ...

    def retrieve(self, graph: str | None = None, format: str = TURTLE) -> str: ...

    def clear(self, graph: str | None = None) -> None: ...

    def ping(self) -> bool: ...


def save(client: TriplestoreClient, obj: TurtleSerializable, graph: str | None = None) -> None:
    """Insert one record's Turtle into `graph` (default graph when None)."""
    if not isinstance(obj, TurtleSerializable):
        raise TypeError(f"{type(obj).__name__} does not provide to_turtle()")
    client.insert(obj.to_turtle(True), TURTLE, graph)


def save_all(
    client: TriplestoreClient,
    objects: Iterable[TurtleSerializable],
    graph: str | None = None,
) -> None:
    """Insert several records in a single request.

    The first record of each class carries that class's prefix block, so a
    batch mixing vocabularies is still valid Turtle.
    """
    parts = []
    declared: set[type] = set()
    for obj in objects:
        if not isinstance(obj, TurtleSerializable):
            raise TypeError(f"{type(obj).__name__} does not provide to_turtle()")
        parts.append(obj.to_turtle(type(obj) not in declared))
        declared.add(type(obj))
    if not parts:
        logger.debug("save_all called with no objects; nothing sent")
        return
    client.insert("\n\n".join(parts), TURTLE, graph)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class FusekiConfig:
    """Connection settings for a Fuseki dataset."""
    base_url: str
    dataset: str
    username: str | None = None
    password: str | None = None
    timeout: float = 30.0

    def __post_init__(self):
        if not self.base_url:
            raise ConfigError("base_url is required")
        if not self.dataset:
            raise ConfigError("dataset is required")
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> FusekiConfig:
        """Create FusekiConfig from a flat dict or one nested under "fuseki".

        Keys may be snake_case or camelCase (baseUrl).
        """
        cfg = config_dict.get("fuseki", config_dict)
        return cls(
            base_url=cfg.get("base_url", cfg.get("baseUrl", "")),
            dataset=cfg.get("dataset", ""),
            username=cfg.get("username"),
            password=cfg.get("password"),
            timeout=float(cfg.get("timeout", 30.0)),
        )

    @classmethod
    def from_file(cls, config_path: str) -> FusekiConfig:
        """Load configuration from a JSON file."""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Configuration file not found: {config_path}") from None
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {config_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object, got {type(config_dict).__name__}"
            )
        return cls.from_dict(config_dict)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> FusekiConfig:
        """Read FUSEKI_URL, FUSEKI_DATASET, FUSEKI_USERNAME, FUSEKI_PASSWORD, FUSEKI_TIMEOUT."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get("FUSEKI_URL", "http://localhost:3030"),
            dataset=env.get("FUSEKI_DATASET", ""),
            username=env.get("FUSEKI_USERNAME") or None,
            password=env.get("FUSEKI_PASSWORD") or None,
            timeout=float(env.get("FUSEKI_TIMEOUT", 30.0)),
        )


# ---------------------------------------------------------------------------
# Connector
# ---------------------------------------------------------------------------

class FusekiConnector:
    """
    Client for an Apache Jena Fuseki dataset.

    Provides SPARQL query/update, Graph Store Protocol reads and writes,
    record persistence helpers and a few server administration calls.
    """

    def __init__(self, config: FusekiConfig, session: requests.Session | None = None):
        if not isinstance(config, FusekiConfig):
            raise TypeError(f"config must be FusekiConfig instance, got {type(config)}")

        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/sparql-query",
            "Accept": SPARQL_RESULTS_JSON,
        })
        if config.username and config.password:
            self.session.auth = (config.username, config.password)

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------

    @property
    def query_endpoint(self) -> str:
        return f"{self.config.base_url}/{self.config.dataset}/query"

    @property
    def update_endpoint(self) -> str:
        return f"{self.config.base_url}/{self.config.dataset}/update"

    @property
    def data_endpoint(self) -> str:
        return f"{self.config.base_url}/{self.config.dataset}/data"

    def gsp_endpoint(self, graph: str | None = None) -> str:
        if graph:
            return f"{self.data_endpoint}?graph={quote(graph, safe='')}"
        return f"{self.data_endpoint}?default"

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        data: str | None = None,
    ) -> requests.Response:
        logger.debug("%s: %s %s", operation, method, url)
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=data.encode("utf-8") if data is not None else None,
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error("%s: Request timeout after %ss", operation, self.config.timeout)
            raise TriplestoreError(operation, f"timeout after {self.config.timeout}s") from None
        except requests.exceptions.RequestException as e:
            logger.error("%s: Request error: %s", operation, e)
            raise TriplestoreError(operation, str(e)) from e

        if not response.ok:
            logger.error("%s: HTTP %s", operation, response.status_code)
            raise TriplestoreError(
                operation,
                f"{response.status_code} {response.reason} - {response.text}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(operation: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.debug("Response text: %s", response.text[:500])
            raise TriplestoreError(operation, f"invalid JSON response: {e}") from e

    # -----------------------------------------------------------------------
    # SPARQL Protocol
    # -----------------------------------------------------------------------

    def query(self, sparql: str) -> dict[str, Any]:
        """Run a SELECT query and return the SPARQL JSON results document."""
        response = self._request("Query", "POST", self.query_endpoint, data=sparql)
        return self._json("Query", response)

    def construct(self, sparql: str, format: str = TURTLE) -> str:
        """Run a CONSTRUCT query and return RDF text in `format`."""
        response = self._request(
            "Construct", "POST", self.query_endpoint,
            headers={"Content-Type": "application/sparql-query", "Accept": format},
            data=sparql,
        )
        return response.text

    def ask(self, sparql: str) -> bool:
        response = self._request("Ask", "POST", self.query_endpoint, data=sparql)
        return bool(self._json("Ask", response).get("boolean", False))

    def update(self, sparql: str) -> None:
        self._request(
            "Update", "POST", self.update_endpoint,
            headers={"Content-Type": "application/sparql-update"},
            data=sparql,
        )

    def batch_update(self, updates: list[str]) -> None:
        """Send several updates as one request, joined with ';'."""
        self.update(";\n".join(updates))

    # -----------------------------------------------------------------------
    # Graph Store Protocol
    # -----------------------------------------------------------------------

    def insert(self, data: str, content_type: str = TURTLE, graph: str | None = None) -> None:
        """POST RDF text into `graph` (default graph when None)."""
        self._request(
            "Insert", "POST", self.gsp_endpoint(graph),
            headers={"Content-Type": content_type},
            data=data,
        )

    def retrieve(self, graph: str | None = None, format: str = TURTLE) -> str:
        response = self._request(
            "Retrieve", "GET", self.gsp_endpoint(graph),
            headers={"Accept": format},
        )
        return response.text

    def clear(self, graph: str | None = None) -> None:
        self._request("Clear", "DELETE", self.gsp_endpoint(graph))

    # -----------------------------------------------------------------------
    # Records
    # -----------------------------------------------------------------------

    def save(self, obj: TurtleSerializable, graph: str | None = None) -> None:
        save(self, obj, graph)

    def save_all(self, objects: Iterable[TurtleSerializable], graph: str | None = None) -> None:
        save_all(self, objects, graph)

    def find_by_type(self, rdf_type: str) -> list[str]:
        """Subject URIs of every resource typed `rdf_type`."""
        results = self.query(f"SELECT ?subject WHERE {{ ?subject a <{rdf_type}> . }}")
        return [b["subject"]["value"] for b in results["results"]["bindings"]]

    def find_by_pattern(self, pattern: str, prefixes: dict[str, str] | None = None) -> dict[str, Any]:
        declarations = "".join(
            f"PREFIX {prefix}: <{uri}>\n" for prefix, uri in (prefixes or {}).items()
        )
        return self.query(f"{declarations}SELECT * WHERE {{\n  {pattern}\n}}")

    def get_person(self, uri: str) -> dict[str, Any] | None:
        """Plain fields of the ex:Person at `uri`, or None if absent."""
        sparql = (
            f"PREFIX ex: <{EX}>\n"
            f"PREFIX xsd: <{XSD}>\n"
            "SELECT ?firstName ?lastName ?birthDate WHERE {\n"
            f"  <{uri}> a ex:Person ;\n"
            "    ex:firstName ?firstName ;\n"
            "    ex:lastName ?lastName ;\n"
            "    ex:birthDate ?birthDate .\n"
            "}"
        )
        bindings = self.query(sparql)["results"]["bindings"]
        if not bindings:
            return None
        row = bindings[0]
        return {
            "uri": uri,
            "firstName": row["firstName"]["value"],
            "lastName": row["lastName"]["value"],
            "birthDate": row["birthDate"]["value"],
        }

    def get_transformed_person(self, uri: str) -> dict[str, Any] | None:
        """Plain fields of the Class:Person at `uri`, or None if absent."""
        sparql = (
            f"PREFIX Person: <{PERSON}>\n"
            f"PREFIX Class: <{CLASS}>\n"
            f"PREFIX ex: <{EX}>\n"
            "SELECT ?firstName ?lastName ?fullName ?age WHERE {\n"
            f"  <{uri}> a Class:Person ;\n"
            "    ex:firstName ?firstName ;\n"
            "    ex:lastName ?lastName ;\n"
            "    Person:fullName ?fullName ;\n"
            "    Person:age ?age .\n"
            "}"
        )
        bindings = self.query(sparql)["results"]["bindings"]
        if not bindings:
            return None
        row = bindings[0]
        return {
            "uri": uri,
            "firstName": row["firstName"]["value"],
            "lastName": row["lastName"]["value"],
            "fullName": row["fullName"]["value"],
            "age": int(row["age"]["value"]),
        }

    # -----------------------------------------------------------------------
    # Server administration
    # -----------------------------------------------------------------------

    def ping(self) -> bool:
        """True if the server answers /$/ping; never raises."""
        try:
            response = self.session.get(
                f"{self.config.base_url}/$/ping", timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.debug("Ping failed: %s", e)
            return False
        return response.ok

    def list_datasets(self) -> list[str]:
        response = self._request(
            "List datasets", "GET", f"{self.config.base_url}/$/datasets",
            headers={"Accept": "application/json"},
        )
        payload = self._json("List datasets", response)
        return [ds["ds.name"].lstrip("/") for ds in payload.get("datasets", [])]

    def get_stats(self) -> dict[str, Any]:
        response = self._request(
            "Get stats", "GET", f"{self.config.base_url}/$/stats/{self.config.dataset}",
            headers={"Accept": "application/json"},
        )
        return self._json("Get stats", response)

    def __repr__(self) -> str:
        return f"FusekiConnector({self.config.base_url}/{self.config.dataset})"


def create_local_connector(dataset: str = "test") -> FusekiConnector:
    """Connector for a Fuseki server on http://localhost:3030."""
    return FusekiConnector(FusekiConfig(base_url="http://localhost:3030", dataset=dataset))
