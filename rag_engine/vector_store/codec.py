"""
JSON persistence format for the vector stores.

Each store is written as one self-describing document:

    {"format": ..., "version": 1, "dimension": d, "records": [...]}

Records keep insertion order and keys are emitted in a fixed order, so
the output is deterministic and diffable. Decoding validates the whole
document and raises CorruptIndexError on any schema violation.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from rag_engine.document_processor.chunker import TextChunk

from .exceptions import CorruptIndexError, IndexNotFoundError, VectorStoreError
from .records import (
    HyPERecord,
    LabeledEmbedding,
    VectorRecord,
    normalize_chunk,
    to_embedding,
)

# Set up logging
logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
VECTOR_STORE_FORMAT = "vector_store"
HYPE_STORE_FORMAT = "hype_vector_store"

_CHUNK_FIELDS = ("id", "parentId", "content", "sequence", "metadata")


def encode_vector_store(
    dimension: int | None, records: Iterable[VectorRecord]
) -> dict[str, Any]:
    """Build the persisted document for a single-embedding store."""
    return {
        "format": VECTOR_STORE_FORMAT,
        "version": FORMAT_VERSION,
        "dimension": dimension or 0,
        "records": [
            {**_encode_chunk(record.chunk), "embedding": list(record.embedding)}
            for record in records
        ],
    }


def encode_hype_store(
    dimension: int | None, records: Iterable[HyPERecord]
) -> dict[str, Any]:
    """Build the persisted document for a multi-embedding store."""
    return {
        "format": HYPE_STORE_FORMAT,
        "version": FORMAT_VERSION,
        "dimension": dimension or 0,
        "records": [
            {
                **_encode_chunk(record.chunk),
                "embeddings": [
                    {"vector": list(item.vector), "label": item.label}
                    for item in record.embeddings
                ],
            }
            for record in records
        ],
    }


def decode_vector_store(
    document: Any, path: Path | None = None
) -> tuple[int | None, list[VectorRecord]]:
    """
    Parse a single-embedding store document.

    Returns:
        Tuple of (dimension, records); dimension is None for an empty store
    """
    dimension, raw_records = _decode_header(document, VECTOR_STORE_FORMAT, path)

    records = []
    for position, raw in enumerate(raw_records):
        chunk = _decode_chunk(raw, position, path)
        if "embedding" not in raw:
            raise CorruptIndexError(
                f"Record {position} is missing required field 'embedding'", path
            )
        embedding = _decode_vector(raw["embedding"], dimension, position, path)
        records.append(VectorRecord(chunk=chunk, embedding=embedding))

    return dimension, records


def decode_hype_store(
    document: Any, path: Path | None = None
) -> tuple[int | None, list[HyPERecord]]:
    """
    Parse a multi-embedding store document.

    Returns:
        Tuple of (dimension, records); dimension is None for an empty store
    """
    dimension, raw_records = _decode_header(document, HYPE_STORE_FORMAT, path)

    records = []
    for position, raw in enumerate(raw_records):
        chunk = _decode_chunk(raw, position, path)
        raw_embeddings = raw.get("embeddings")
        if not isinstance(raw_embeddings, list) or not raw_embeddings:
            raise CorruptIndexError(
                f"Record {position} must have a non-empty 'embeddings' list", path
            )

        embeddings = []
        for item in raw_embeddings:
            if not isinstance(item, dict) or "vector" not in item:
                raise CorruptIndexError(
                    f"Record {position} has an embedding without 'vector'", path
                )
            label = item.get("label")
            if not isinstance(label, str):
                raise CorruptIndexError(
                    f"Record {position} has an embedding without a string 'label'",
                    path,
                )
            vector = _decode_vector(item["vector"], dimension, position, path)
            embeddings.append(LabeledEmbedding(vector=vector, label=label))

        records.append(HyPERecord(chunk=chunk, embeddings=tuple(embeddings)))

    return dimension, records


def write_document(document: dict[str, Any], path: str | Path) -> Path:
    """
    Atomically write a document to disk.

    The JSON is written to a temporary file next to the target and then
    renamed over it, so an interrupted write never leaves a partial index.

    Returns:
        The resolved path that was written
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)

    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            json.dump(document, tmp, indent=2, ensure_ascii=False, allow_nan=False)
            tmp.write("\n")
        os.replace(tmp.name, target)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise

    logger.debug(f"Wrote index document to {target}")
    return target


def read_document(path: str | Path) -> Any:
    """
    Read a persisted document from disk.

    Raises:
        IndexNotFoundError: If the file does not exist
        CorruptIndexError: If the file is not valid JSON
    """
    resolved = Path(path).resolve()
    if not resolved.is_file():
        raise IndexNotFoundError(resolved)

    try:
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CorruptIndexError(f"Index is not valid JSON: {e}", resolved) from e


def _encode_chunk(chunk: TextChunk) -> dict[str, Any]:
    return {
        "id": chunk.id,
        "parentId": chunk.parent_id,
        "content": chunk.content,
        "sequence": chunk.sequence,
        "metadata": dict(chunk.metadata),
    }


def _decode_header(
    document: Any, expected_format: str, path: Path | None
) -> tuple[int | None, list[Any]]:
    if not isinstance(document, dict):
        raise CorruptIndexError("Index document must be a JSON object", path)

    doc_format = document.get("format", expected_format)
    if doc_format != expected_format:
        raise CorruptIndexError(
            f"Index format is {doc_format!r}, expected {expected_format!r}", path
        )

    version = document.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise CorruptIndexError(f"Unsupported index version: {version!r}", path)

    dimension = document.get("dimension")
    if isinstance(dimension, bool) or not isinstance(dimension, int) or dimension < 0:
        raise CorruptIndexError(
            f"Index 'dimension' must be a positive integer, got {dimension!r}", path
        )

    records = document.get("records")
    if not isinstance(records, list):
        raise CorruptIndexError("Index 'records' must be a list", path)

    if dimension == 0:
        if records:
            raise CorruptIndexError(
                "Index 'dimension' must be a positive integer when records exist",
                path,
            )
        return None, records

    return dimension, records


def _decode_chunk(raw: Any, position: int, path: Path | None) -> TextChunk:
    if not isinstance(raw, dict):
        raise CorruptIndexError(f"Record {position} must be a JSON object", path)

    missing = [name for name in _CHUNK_FIELDS if name not in raw]
    if missing:
        raise CorruptIndexError(
            f"Record {position} is missing required fields: {', '.join(missing)}",
            path,
        )

    for name in ("id", "parentId", "content"):
        if not isinstance(raw[name], str):
            raise CorruptIndexError(
                f"Record {position} field '{name}' must be a string", path
            )
    if not isinstance(raw["metadata"], dict):
        raise CorruptIndexError(
            f"Record {position} field 'metadata' must be an object", path
        )

    chunk = TextChunk(
        id=raw["id"],
        parent_id=raw["parentId"],
        content=raw["content"],
        sequence=raw["sequence"],
        metadata=raw["metadata"],
    )
    try:
        return normalize_chunk(chunk)
    except ValueError as e:
        raise CorruptIndexError(f"Record {position} is invalid: {e}", path) from e


def _decode_vector(
    raw: Any, dimension: int, position: int, path: Path | None
) -> tuple[float, ...]:
    if not isinstance(raw, list):
        raise CorruptIndexError(f"Record {position} vector must be a list", path)
    if len(raw) != dimension:
        raise CorruptIndexError(
            f"Record {position} vector has length {len(raw)}, "
            f"declared dimension is {dimension}",
            path,
        )
    try:
        return to_embedding(raw)
    except VectorStoreError as e:
        raise CorruptIndexError(f"Record {position} vector is invalid: {e}", path) from e
