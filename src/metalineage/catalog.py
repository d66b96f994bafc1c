"""Table and field entities and the in-memory catalog snapshot.

The catalog is the read-only view of warehouse metadata that lineage
computations run against. It can be populated programmatically, from a
JSON/YAML document, or from polars frames of metadata records as exported
from a relational metadata store.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from operator import attrgetter
from pathlib import Path
from typing import Any, Iterable

import polars as pl
import yaml

from metalineage.base import CatalogError, NodeNotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# Entities
# =============================================================================


@dataclass(eq=False, repr=False)
class TableEntity:
    """A named dataset in the warehouse dependency graph.

    Attributes:
        fqdn: Fully qualified name, unique across the catalog
        dependencies: Upstream tables this table reads from
        successors: Downstream tables reading from this table
        fields: Fields in declaration order
    """

    fqdn: str
    dependencies: set["TableEntity"] = field(default_factory=set)
    successors: set["TableEntity"] = field(default_factory=set)
    fields: list["FieldEntity"] = field(default_factory=list)

    def ordered_dependencies(self) -> list["TableEntity"]:
        return sorted(self.dependencies, key=attrgetter("fqdn"))

    def ordered_successors(self) -> list["TableEntity"]:
        return sorted(self.successors, key=attrgetter("fqdn"))

    def __hash__(self) -> int:
        return hash(self.fqdn)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableEntity):
            return False
        return self.fqdn == other.fqdn

    def __repr__(self) -> str:
        return f"<TableEntity {self.fqdn}>"


@dataclass(eq=False, repr=False)
class FieldEntity:
    """A column of a table with its own field-to-field edges.

    Attributes:
        field_id: Opaque identifier, unique across the catalog
        name: Column name
        table: Owning table
        dependencies: Fields this field is computed from
        successors: Fields computed from this field
    """

    field_id: str
    name: str
    table: TableEntity
    dependencies: set["FieldEntity"] = field(default_factory=set)
    successors: set["FieldEntity"] = field(default_factory=set)

    def ordered_dependencies(self) -> list["FieldEntity"]:
        return sorted(self.dependencies, key=attrgetter("field_id"))

    def ordered_successors(self) -> list["FieldEntity"]:
        return sorted(self.successors, key=attrgetter("field_id"))

    def __hash__(self) -> int:
        return hash(self.field_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldEntity):
            return False
        return self.field_id == other.field_id

    def __repr__(self) -> str:
        return f"<FieldEntity {self.field_id} of {self.table.fqdn}>"


# =============================================================================
# Catalog
# =============================================================================


TABLE_COLUMNS = ("fqdn",)
DEPENDENCY_COLUMNS = ("fqdn", "dependency_fqdn")
FIELD_COLUMNS = ("table_fqdn", "field_id", "name")
FIELD_DEPENDENCY_COLUMNS = ("field_id", "dependency_field_id")


class MetadataCatalog:
    """An in-memory snapshot of tables, fields and their dependencies.

    Example:
        >>> catalog = MetadataCatalog()
        >>> raw = catalog.add_table("shop.raw_orders")
        >>> orders = catalog.add_table("shop.orders")
        >>> catalog.add_dependency("shop.orders", "shop.raw_orders")
        >>> catalog.get_table("shop.raw_orders").successors
        {<TableEntity shop.orders>}
    """

    def __init__(self) -> None:
        self._tables: dict[str, TableEntity] = {}
        self._fields: dict[str, FieldEntity] = {}

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def add_table(self, fqdn: str) -> TableEntity:
        """Add a table, returning the existing entity if already present."""
        if not fqdn:
            raise CatalogError("Table fqdn must be a non-empty string")
        table = self._tables.get(fqdn)
        if table is None:
            table = TableEntity(fqdn=fqdn)
            self._tables[fqdn] = table
        return table

    def add_field(
        self,
        table_fqdn: str,
        field_id: str,
        name: str | None = None,
    ) -> FieldEntity:
        """Add a field to an existing table.

        Args:
            table_fqdn: Owning table
            field_id: Catalog-wide field identifier
            name: Column name (defaults to the last dotted part of the id)

        Raises:
            NodeNotFoundError: If the table is unknown
            CatalogError: If the id is already used by another table
        """
        table = self.get_table(table_fqdn)
        existing = self._fields.get(field_id)
        if existing is not None:
            if existing.table is not table:
                raise CatalogError(
                    f"Field id '{field_id}' already belongs to table "
                    f"'{existing.table.fqdn}', cannot add it to '{table_fqdn}'"
                )
            return existing

        entity = FieldEntity(
            field_id=field_id,
            name=name or field_id.rsplit(".", 1)[-1],
            table=table,
        )
        self._fields[field_id] = entity
        table.fields.append(entity)
        return entity

    def add_dependency(self, consumer_fqdn: str, producer_fqdn: str) -> None:
        """Record that ``consumer_fqdn`` reads from ``producer_fqdn``."""
        consumer = self.get_table(consumer_fqdn)
        producer = self.get_table(producer_fqdn)
        consumer.dependencies.add(producer)
        producer.successors.add(consumer)

    def add_field_dependency(self, consumer_id: str, producer_id: str) -> None:
        """Record that field ``consumer_id`` is computed from ``producer_id``."""
        consumer = self.get_field(consumer_id)
        producer = self.get_field(producer_id)
        consumer.dependencies.add(producer)
        producer.successors.add(consumer)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_table(self, fqdn: str) -> TableEntity:
        """Get a table by fqdn.

        Raises:
            NodeNotFoundError: If the table is not in the snapshot
        """
        table = self._tables.get(fqdn)
        if table is None:
            raise NodeNotFoundError(fqdn, kind="table")
        return table

    def get_field(self, field_id: str) -> FieldEntity:
        """Get a field by id.

        Raises:
            NodeNotFoundError: If the field is not in the snapshot
        """
        entity = self._fields.get(field_id)
        if entity is None:
            raise NodeNotFoundError(field_id, kind="field")
        return entity

    def has_table(self, fqdn: str) -> bool:
        return fqdn in self._tables

    def has_field(self, field_id: str) -> bool:
        return field_id in self._fields

    @property
    def tables(self) -> list[TableEntity]:
        return list(self._tables.values())

    @property
    def fields(self) -> list[FieldEntity]:
        return list(self._fields.values())

    @property
    def table_count(self) -> int:
        return len(self._tables)

    @property
    def field_count(self) -> int:
        return len(self._fields)

    def get_roots(self) -> list[TableEntity]:
        """Tables without upstream dependencies (ignoring self-loops)."""
        return [t for t in self._tables.values() if not t.dependencies - {t}]

    def get_leaves(self) -> list[TableEntity]:
        """Tables without downstream successors (ignoring self-loops)."""
        return [t for t in self._tables.values() if not t.successors - {t}]

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize the snapshot to its document form."""
        return {
            "tables": [
                {
                    "fqdn": table.fqdn,
                    "dependencies": [t.fqdn for t in table.ordered_dependencies()],
                    "fields": [
                        {
                            "id": f.field_id,
                            "name": f.name,
                            "dependencies": [d.field_id for d in f.ordered_dependencies()],
                        }
                        for f in table.fields
                    ],
                }
                for table in self._tables.values()
            ]
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetadataCatalog":
        """Build a snapshot from its document form.

        Tables and fields are created first so dependencies may reference
        entries declared later in the document.

        Raises:
            CatalogError: If an entry is malformed or references an
                unknown table or field
        """
        if not isinstance(data, dict):
            raise CatalogError(
                "Invalid catalog document: expected a mapping with a 'tables' list. "
                "Example: {'tables': [{'fqdn': 'db.table', 'dependencies': []}]}"
            )

        catalog = cls()
        entries = _entry_list(data, "tables", "catalog document")

        for entry in entries:
            if not isinstance(entry, dict) or "fqdn" not in entry:
                raise CatalogError(
                    f"Invalid table entry {entry!r}: each table must have an 'fqdn' field"
                )
            fqdn = str(entry["fqdn"])
            catalog.add_table(fqdn)
            for field_entry in _entry_list(entry, "fields", f"table '{fqdn}'"):
                if not isinstance(field_entry, dict) or "id" not in field_entry:
                    raise CatalogError(
                        f"Invalid field entry {field_entry!r} in table '{fqdn}': "
                        "each field must have an 'id'"
                    )
                catalog.add_field(fqdn, str(field_entry["id"]), field_entry.get("name"))

        for entry in entries:
            fqdn = str(entry["fqdn"])
            for dependency in _entry_list(entry, "dependencies", f"table '{fqdn}'"):
                if not catalog.has_table(str(dependency)):
                    raise CatalogError(
                        f"Table '{fqdn}' depends on unknown table '{dependency}'"
                    )
                catalog.add_dependency(fqdn, str(dependency))
            for field_entry in _entry_list(entry, "fields", f"table '{fqdn}'"):
                field_id = str(field_entry["id"])
                for dependency in _entry_list(field_entry, "dependencies", f"field '{field_id}'"):
                    if not catalog.has_field(str(dependency)):
                        raise CatalogError(
                            f"Field '{field_id}' depends on unknown field '{dependency}'"
                        )
                    catalog.add_field_dependency(field_id, str(dependency))

        logger.debug(
            "Loaded catalog with %d tables and %d fields",
            catalog.table_count,
            catalog.field_count,
        )
        return catalog

    @classmethod
    def from_frames(
        cls,
        tables: pl.DataFrame,
        dependencies: pl.DataFrame,
        fields: pl.DataFrame | None = None,
        field_dependencies: pl.DataFrame | None = None,
    ) -> "MetadataCatalog":
        """Build a snapshot from frames of metadata records.

        Args:
            tables: One row per table, column ``fqdn``
            dependencies: Columns ``fqdn`` and ``dependency_fqdn``
            fields: Columns ``table_fqdn``, ``field_id`` and ``name``
            field_dependencies: Columns ``field_id`` and ``dependency_field_id``

        Field rows of unknown tables and dependency rows referencing unknown
        tables or fields are skipped with a warning, as metadata exports
        routinely contain references to tables outside the exported scope.
        """
        catalog = cls()

        for row in _records(tables, TABLE_COLUMNS, "tables"):
            catalog.add_table(row["fqdn"])

        if fields is not None:
            for row in _records(fields, FIELD_COLUMNS, "fields"):
                if not catalog.has_table(row["table_fqdn"]):
                    logger.warning(
                        "Skipping field %s: table %s not in snapshot",
                        row["field_id"],
                        row["table_fqdn"],
                    )
                    continue
                catalog.add_field(row["table_fqdn"], row["field_id"], row["name"])

        for row in _records(dependencies, DEPENDENCY_COLUMNS, "dependencies"):
            if not (catalog.has_table(row["fqdn"]) and catalog.has_table(row["dependency_fqdn"])):
                logger.warning(
                    "Skipping dependency %s -> %s: table not in snapshot",
                    row["fqdn"],
                    row["dependency_fqdn"],
                )
                continue
            catalog.add_dependency(row["fqdn"], row["dependency_fqdn"])

        if field_dependencies is not None:
            for row in _records(field_dependencies, FIELD_DEPENDENCY_COLUMNS, "field_dependencies"):
                if not (
                    catalog.has_field(row["field_id"])
                    and catalog.has_field(row["dependency_field_id"])
                ):
                    logger.warning(
                        "Skipping field dependency %s -> %s: field not in snapshot",
                        row["field_id"],
                        row["dependency_field_id"],
                    )
                    continue
                catalog.add_field_dependency(row["field_id"], row["dependency_field_id"])

        return catalog

    @classmethod
    def load_csv_dir(cls, directory: str | Path) -> "MetadataCatalog":
        """Load a snapshot from a directory of CSV metadata exports.

        Expects ``tables.csv`` and ``dependencies.csv``; ``fields.csv`` and
        ``field_dependencies.csv`` are optional.
        """
        directory = Path(directory)

        def read(name: str, required: bool) -> pl.DataFrame | None:
            path = directory / name
            if not path.exists():
                if required:
                    raise CatalogError(f"Missing metadata export: {path}")
                return None
            # every column as text so numeric-looking ids keep their form
            return pl.read_csv(path, infer_schema_length=0)

        return cls.from_frames(
            tables=read("tables.csv", True),
            dependencies=read("dependencies.csv", True),
            fields=read("fields.csv", False),
            field_dependencies=read("field_dependencies.csv", False),
        )

    def save(self, path: str | Path) -> None:
        """Save the snapshot as JSON or YAML, chosen by file extension."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(self.to_dict(), sort_keys=False), encoding="utf-8")
        else:
            path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: str | Path) -> "MetadataCatalog":
        """Load a snapshot from a JSON/YAML document or a CSV export directory.

        Raises:
            FileNotFoundError: If the path does not exist
            CatalogError: If the file is empty or cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Catalog not found: {path}")

        if path.is_dir():
            return cls.load_csv_dir(path)

        content = path.read_text(encoding="utf-8").strip()
        if not content:
            raise CatalogError(f"Catalog file is empty: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content)
            elif suffix == ".json":
                data = json.loads(content)
            else:
                raise CatalogError(
                    f"Unsupported catalog format: {suffix or '<none>'}. "
                    "Use .json, .yaml/.yml or a directory of CSV exports."
                )
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise CatalogError(f"Invalid catalog file {path}: {e}") from e

        return cls.from_dict(data)

    def __repr__(self) -> str:
        return f"<MetadataCatalog tables={self.table_count} fields={self.field_count}>"


def _records(
    frame: pl.DataFrame,
    columns: Iterable[str],
    name: str,
) -> Iterable[dict[str, str]]:
    columns = list(columns)
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise CatalogError(
            f"Frame '{name}' is missing required column(s): {', '.join(missing)}. "
            f"Expected columns: {', '.join(columns)}"
        )
    selected = frame.select([pl.col(c).cast(pl.Utf8) for c in columns]).drop_nulls()
    return selected.iter_rows(named=True)


def _entry_list(entry: dict[str, Any], key: str, owner: str) -> list[Any]:
    """A list-valued document key; a missing or empty key reads as ``[]``."""
    value = entry.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CatalogError(
            f"Invalid '{key}' in {owner}: expected a list, got {type(value).__name__}"
        )
    return value
