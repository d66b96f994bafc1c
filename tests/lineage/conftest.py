"""Shared catalog fixtures for lineage tests."""

from __future__ import annotations

import pytest

from metalineage.catalog import MetadataCatalog


@pytest.fixture
def chain_catalog() -> MetadataCatalog:
    """Data flows w.a -> w.b -> w.c (b reads a, c reads b)."""
    catalog = MetadataCatalog()
    for fqdn in ("w.a", "w.b", "w.c"):
        catalog.add_table(fqdn)
    catalog.add_dependency("w.b", "w.a")
    catalog.add_dependency("w.c", "w.b")
    return catalog


@pytest.fixture
def diamond_catalog() -> MetadataCatalog:
    """w.a reads w.b and w.c, which both read w.d."""
    catalog = MetadataCatalog()
    for fqdn in ("w.a", "w.b", "w.c", "w.d"):
        catalog.add_table(fqdn)
    catalog.add_dependency("w.a", "w.b")
    catalog.add_dependency("w.a", "w.c")
    catalog.add_dependency("w.b", "w.d")
    catalog.add_dependency("w.c", "w.d")
    return catalog


@pytest.fixture
def field_catalog() -> MetadataCatalog:
    """Three layers of user tables with field level edges.

    src.users.id   -> stg.users.id   -> mart.user_dim.user_id
                                     -> mart.user_dim.label
    src.users.name -> stg.users.name -> mart.user_dim.label
    """
    catalog = MetadataCatalog()
    for fqdn in ("src.users", "stg.users", "mart.user_dim"):
        catalog.add_table(fqdn)
    catalog.add_dependency("stg.users", "src.users")
    catalog.add_dependency("mart.user_dim", "stg.users")

    catalog.add_field("src.users", "src.users.id")
    catalog.add_field("src.users", "src.users.name")
    catalog.add_field("stg.users", "stg.users.id")
    catalog.add_field("stg.users", "stg.users.name")
    catalog.add_field("mart.user_dim", "mart.user_dim.user_id")
    catalog.add_field("mart.user_dim", "mart.user_dim.label")

    catalog.add_field_dependency("stg.users.id", "src.users.id")
    catalog.add_field_dependency("stg.users.name", "src.users.name")
    catalog.add_field_dependency("mart.user_dim.user_id", "stg.users.id")
    catalog.add_field_dependency("mart.user_dim.label", "stg.users.name")
    catalog.add_field_dependency("mart.user_dim.label", "stg.users.id")
    return catalog


@pytest.fixture
def catalog_document() -> dict:
    """Document form of a small shop warehouse."""
    return {
        "tables": [
            {
                "fqdn": "shop.raw_orders",
                "fields": [
                    {"id": "shop.raw_orders.id", "name": "id"},
                    {"id": "shop.raw_orders.amount", "name": "amount"},
                ],
            },
            {
                "fqdn": "shop.orders",
                "dependencies": ["shop.raw_orders"],
                "fields": [
                    {
                        "id": "shop.orders.order_id",
                        "name": "order_id",
                        "dependencies": ["shop.raw_orders.id"],
                    },
                    {
                        "id": "shop.orders.amount",
                        "name": "amount",
                        "dependencies": ["shop.raw_orders.amount"],
                    },
                ],
            },
            {
                "fqdn": "shop.order_stats",
                "dependencies": ["shop.orders"],
                "fields": [
                    {
                        "id": "shop.order_stats.total",
                        "name": "total",
                        "dependencies": ["shop.orders.amount"],
                    },
                ],
            },
        ]
    }
