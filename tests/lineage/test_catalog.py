"""Tests for the metadata catalog."""

from __future__ import annotations

import json
import logging

import polars as pl
import pytest
import yaml

from metalineage.base import CatalogError, NodeNotFoundError
from metalineage.catalog import MetadataCatalog


# =============================================================================
# Test Population and Lookup
# =============================================================================


class TestMetadataCatalog:
    """Tests for programmatic population."""

    def test_add_table_is_idempotent(self):
        catalog = MetadataCatalog()
        first = catalog.add_table("w.orders")
        second = catalog.add_table("w.orders")

        assert first is second
        assert catalog.table_count == 1

    def test_add_table_requires_name(self):
        with pytest.raises(CatalogError):
            MetadataCatalog().add_table("")

    def test_add_dependency_links_both_sides(self, chain_catalog):
        a = chain_catalog.get_table("w.a")
        b = chain_catalog.get_table("w.b")

        assert b.dependencies == {a}
        assert a.successors == {b}

    def test_add_dependency_unknown_table(self, chain_catalog):
        with pytest.raises(NodeNotFoundError, match="w.nowhere"):
            chain_catalog.add_dependency("w.a", "w.nowhere")

    def test_get_table_not_found(self):
        with pytest.raises(NodeNotFoundError) as exc_info:
            MetadataCatalog().get_table("w.missing")

        assert exc_info.value.node_id == "w.missing"
        assert str(exc_info.value) == "Table not found: w.missing"

    def test_add_field_defaults_name(self):
        catalog = MetadataCatalog()
        catalog.add_table("w.orders")
        entity = catalog.add_field("w.orders", "w.orders.amount")

        assert entity.name == "amount"
        assert entity.table is catalog.get_table("w.orders")
        assert catalog.get_table("w.orders").fields == [entity]

    def test_add_field_unknown_table(self):
        with pytest.raises(NodeNotFoundError):
            MetadataCatalog().add_field("w.orders", "w.orders.id")

    def test_field_id_unique_across_tables(self):
        catalog = MetadataCatalog()
        catalog.add_table("w.a")
        catalog.add_table("w.b")
        catalog.add_field("w.a", "shared")

        with pytest.raises(CatalogError, match="already belongs"):
            catalog.add_field("w.b", "shared")

    def test_get_field_not_found(self):
        with pytest.raises(NodeNotFoundError) as exc_info:
            MetadataCatalog().get_field("f-1")

        assert exc_info.value.kind == "field"
        assert str(exc_info.value) == "Field not found: f-1"

    def test_roots_and_leaves(self, diamond_catalog):
        assert [t.fqdn for t in diamond_catalog.get_roots()] == ["w.d"]
        assert [t.fqdn for t in diamond_catalog.get_leaves()] == ["w.a"]

    def test_self_loop_does_not_hide_root(self):
        catalog = MetadataCatalog()
        catalog.add_table("w.x")
        catalog.add_dependency("w.x", "w.x")

        assert [t.fqdn for t in catalog.get_roots()] == ["w.x"]
        assert [t.fqdn for t in catalog.get_leaves()] == ["w.x"]


# =============================================================================
# Test Documents
# =============================================================================


class TestCatalogDocuments:
    """Tests for the JSON/YAML document form."""

    def test_from_dict(self, catalog_document):
        catalog = MetadataCatalog.from_dict(catalog_document)

        assert catalog.table_count == 3
        assert catalog.field_count == 5
        orders = catalog.get_table("shop.orders")
        assert [t.fqdn for t in orders.dependencies] == ["shop.raw_orders"]
        total = catalog.get_field("shop.order_stats.total")
        assert [f.field_id for f in total.dependencies] == ["shop.orders.amount"]

    def test_forward_references(self):
        catalog = MetadataCatalog.from_dict(
            {"tables": [{"fqdn": "w.b", "dependencies": ["w.a"]}, {"fqdn": "w.a"}]}
        )

        assert catalog.get_table("w.a").successors == {catalog.get_table("w.b")}

    def test_unknown_dependency(self):
        with pytest.raises(CatalogError, match="unknown table 'w.ghost'"):
            MetadataCatalog.from_dict({"tables": [{"fqdn": "w.a", "dependencies": ["w.ghost"]}]})

    def test_unknown_field_dependency(self):
        document = {
            "tables": [
                {"fqdn": "w.a", "fields": [{"id": "w.a.x", "dependencies": ["w.a.ghost"]}]}
            ]
        }
        with pytest.raises(CatalogError, match="unknown field"):
            MetadataCatalog.from_dict(document)

    @pytest.mark.parametrize(
        "document",
        [[], {"tables": "w.a"}, {"tables": [{"name": "w.a"}]}],
    )
    def test_malformed_document(self, document):
        with pytest.raises(CatalogError):
            MetadataCatalog.from_dict(document)

    def test_empty_yaml_keys(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("tables:\n  - fqdn: w.a\n    dependencies:\n    fields:\n  - fqdn: w.b\n")

        catalog = MetadataCatalog.load(path)

        assert catalog.table_count == 2
        assert catalog.get_table("w.a").dependencies == set()
        assert catalog.get_table("w.a").fields == []

    def test_empty_tables_key(self):
        assert MetadataCatalog.from_dict({"tables": None}).table_count == 0

    @pytest.mark.parametrize(
        "entry",
        [
            {"fqdn": "w.a", "dependencies": "w.b"},
            {"fqdn": "w.a", "fields": {"id": "w.a.x"}},
            {"fqdn": "w.a", "fields": ["w.a.x"]},
            {"fqdn": "w.a", "fields": [{"id": "w.a.x", "dependencies": "w.a.y"}]},
        ],
    )
    def test_non_list_values(self, entry):
        with pytest.raises(CatalogError):
            MetadataCatalog.from_dict({"tables": [entry, {"fqdn": "w.b"}]})

    def test_to_dict_lists_sorted_dependencies(self, diamond_catalog):
        document = diamond_catalog.to_dict()
        entry = next(t for t in document["tables"] if t["fqdn"] == "w.a")

        assert entry["dependencies"] == ["w.b", "w.c"]

    def test_save_and_load_yaml(self, tmp_path, catalog_document):
        path = tmp_path / "catalog.yaml"
        MetadataCatalog.from_dict(catalog_document).save(path)

        assert yaml.safe_load(path.read_text())["tables"][0]["fqdn"] == "shop.raw_orders"
        loaded = MetadataCatalog.load(path)
        assert loaded.table_count == 3
        assert loaded.field_count == 5

    def test_load_json(self, tmp_path, catalog_document):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(catalog_document))

        catalog = MetadataCatalog.load(path)

        assert catalog.has_table("shop.order_stats")
        assert catalog.has_field("shop.orders.order_id")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MetadataCatalog.load(tmp_path / "nope.yaml")

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("   \n")

        with pytest.raises(CatalogError, match="empty"):
            MetadataCatalog.load(path)

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json")

        with pytest.raises(CatalogError, match="Invalid catalog file"):
            MetadataCatalog.load(path)

    def test_load_unsupported_format(self, tmp_path):
        path = tmp_path / "catalog.txt"
        path.write_text("tables: []")

        with pytest.raises(CatalogError, match="Unsupported catalog format"):
            MetadataCatalog.load(path)


# =============================================================================
# Test Frames and CSV Exports
# =============================================================================


class TestCatalogFrames:
    """Tests for loading metadata record frames."""

    def test_from_frames(self):
        catalog = MetadataCatalog.from_frames(
            tables=pl.DataFrame({"fqdn": ["w.a", "w.b"]}),
            dependencies=pl.DataFrame({"fqdn": ["w.b"], "dependency_fqdn": ["w.a"]}),
            fields=pl.DataFrame(
                {
                    "table_fqdn": ["w.a", "w.b"],
                    "field_id": ["1", "2"],
                    "name": ["id", "a_id"],
                }
            ),
            field_dependencies=pl.DataFrame({"field_id": ["2"], "dependency_field_id": ["1"]}),
        )

        assert catalog.get_table("w.b").dependencies == {catalog.get_table("w.a")}
        assert catalog.get_field("2").name == "a_id"
        assert catalog.get_field("1").successors == {catalog.get_field("2")}

    def test_numeric_ids_are_cast_to_text(self):
        catalog = MetadataCatalog.from_frames(
            tables=pl.DataFrame({"fqdn": ["w.a"]}),
            dependencies=pl.DataFrame(schema={"fqdn": pl.Utf8, "dependency_fqdn": pl.Utf8}),
            fields=pl.DataFrame({"table_fqdn": ["w.a"], "field_id": [42], "name": ["id"]}),
        )

        assert catalog.has_field("42")

    def test_dangling_dependency_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="metalineage.catalog"):
            catalog = MetadataCatalog.from_frames(
                tables=pl.DataFrame({"fqdn": ["w.a"]}),
                dependencies=pl.DataFrame({"fqdn": ["w.a"], "dependency_fqdn": ["other.x"]}),
            )

        assert catalog.get_table("w.a").dependencies == set()
        assert "other.x" in caplog.text

    def test_field_of_unknown_table_is_skipped(self, caplog):
        with caplog.at_level(logging.WARNING, logger="metalineage.catalog"):
            catalog = MetadataCatalog.from_frames(
                tables=pl.DataFrame({"fqdn": ["w.a"]}),
                dependencies=pl.DataFrame(schema={"fqdn": pl.Utf8, "dependency_fqdn": pl.Utf8}),
                fields=pl.DataFrame(
                    {
                        "table_fqdn": ["w.a", "other.t"],
                        "field_id": ["w.a.id", "other.t.id"],
                        "name": ["id", "id"],
                    }
                ),
                field_dependencies=pl.DataFrame(
                    {"field_id": ["w.a.id"], "dependency_field_id": ["other.t.id"]}
                ),
            )

        assert catalog.field_count == 1
        assert catalog.get_field("w.a.id").dependencies == set()
        assert "other.t" in caplog.text

    def test_missing_column(self):
        with pytest.raises(CatalogError, match="dependency_fqdn"):
            MetadataCatalog.from_frames(
                tables=pl.DataFrame({"fqdn": ["w.a"]}),
                dependencies=pl.DataFrame({"fqdn": ["w.a"]}),
            )

    def test_load_csv_dir(self, tmp_path):
        (tmp_path / "tables.csv").write_text("fqdn\nw.a\nw.b\nw.c\n")
        (tmp_path / "dependencies.csv").write_text("fqdn,dependency_fqdn\nw.b,w.a\nw.c,w.b\n")
        (tmp_path / "fields.csv").write_text("table_fqdn,field_id,name\nw.a,007,id\nw.b,008,id\n")
        (tmp_path / "field_dependencies.csv").write_text("field_id,dependency_field_id\n008,007\n")

        catalog = MetadataCatalog.load(tmp_path)

        assert catalog.table_count == 3
        assert [t.fqdn for t in catalog.get_roots()] == ["w.a"]
        assert catalog.get_field("008").dependencies == {catalog.get_field("007")}

    def test_load_csv_dir_requires_tables(self, tmp_path):
        (tmp_path / "dependencies.csv").write_text("fqdn,dependency_fqdn\n")

        with pytest.raises(CatalogError, match="tables.csv"):
            MetadataCatalog.load(tmp_path)
