"""JSON encoding of lineage documents."""

from __future__ import annotations

import json
from typing import Any

from metalineage.base import SerializationError


def encode_json(document: Any, indent: int | None = None) -> str:
    """Encode a lineage document as JSON.

    Raises:
        SerializationError: If the document holds values JSON cannot represent
    """
    try:
        return json.dumps(document, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Could not encode lineage document: {e}") from e


def encode_for_script(document: Any) -> str:
    """Encode a document for embedding inside an HTML ``<script>`` element."""
    return encode_json(document).replace("</", "<\\/")
