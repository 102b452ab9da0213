"""Tests for the JSON index format."""

import json

import pytest

from rag_engine.document_processor.chunker import TextChunk
from rag_engine.vector_store import codec
from rag_engine.vector_store.exceptions import CorruptIndexError, IndexNotFoundError
from rag_engine.vector_store.records import HyPERecord, LabeledEmbedding, VectorRecord


@pytest.fixture
def chunk():
    """Create a sample chunk."""
    return TextChunk(
        id="doc-0-chunk-0",
        parent_id="doc-0",
        content="Cosine similarity compares directions.",
        sequence=0,
        metadata={"title": "intro.md", "tags": ["math", "vectors"], "page": 3},
    )


@pytest.fixture
def vector_document(chunk):
    """Encoded single-embedding store document."""
    return codec.encode_vector_store(
        3, [VectorRecord(chunk=chunk, embedding=(0.1, 0.2, 0.3))]
    )


@pytest.fixture
def hype_document(chunk):
    """Encoded multi-embedding store document."""
    record = HyPERecord(
        chunk=chunk,
        embeddings=(
            LabeledEmbedding(vector=(1.0, 0.0), label="What is cosine similarity?"),
            LabeledEmbedding(vector=(0.0, 1.0), label="How are directions compared?"),
        ),
    )
    return codec.encode_hype_store(2, [record])


# Encoding tests


def test_encode_vector_store_layout(vector_document):
    """Test the top-level keys and record fields."""
    assert list(vector_document) == ["format", "version", "dimension", "records"]
    assert vector_document["format"] == "vector_store"
    assert vector_document["version"] == 1
    assert vector_document["dimension"] == 3

    record = vector_document["records"][0]
    assert list(record) == [
        "id",
        "parentId",
        "content",
        "sequence",
        "metadata",
        "embedding",
    ]
    assert record["parentId"] == "doc-0"
    assert record["embedding"] == [0.1, 0.2, 0.3]


def test_encode_hype_store_layout(hype_document):
    """Test that labeled embeddings are written in order."""
    assert hype_document["format"] == "hype_vector_store"

    embeddings = hype_document["records"][0]["embeddings"]
    assert embeddings[0] == {"vector": [1.0, 0.0], "label": "What is cosine similarity?"}
    assert embeddings[1]["label"] == "How are directions compared?"


def test_encode_empty_store_uses_zero_dimension():
    """Test that an empty store records dimension 0."""
    document = codec.encode_vector_store(None, [])

    assert document["dimension"] == 0
    assert document["records"] == []


# Decoding tests


def test_decode_vector_store(vector_document, chunk):
    """Test decoding an encoded document."""
    dimension, records = codec.decode_vector_store(vector_document)

    assert dimension == 3
    assert records[0].chunk == chunk
    assert records[0].embedding == (0.1, 0.2, 0.3)


def test_decode_hype_store(hype_document):
    """Test decoding labeled embeddings."""
    dimension, records = codec.decode_hype_store(hype_document)

    assert dimension == 2
    assert [item.label for item in records[0].embeddings] == [
        "What is cosine similarity?",
        "How are directions compared?",
    ]


def test_decode_empty_store():
    """Test that dimension 0 with no records decodes to an unset dimension."""
    dimension, records = codec.decode_vector_store(
        {"format": "vector_store", "version": 1, "dimension": 0, "records": []}
    )

    assert dimension is None
    assert records == []


def test_decode_accepts_missing_format_and_version(vector_document):
    """Test that format and version are optional."""
    del vector_document["format"]
    del vector_document["version"]

    _, records = codec.decode_vector_store(vector_document)

    assert len(records) == 1


@pytest.mark.parametrize(
    "mutate",
    [
        lambda doc: doc.update(dimension=-1),
        lambda doc: doc.update(dimension="3"),
        lambda doc: doc.update(dimension=True),
        lambda doc: doc.update(dimension=0),
        lambda doc: doc.pop("dimension"),
        lambda doc: doc.update(records={}),
        lambda doc: doc.update(version=2),
        lambda doc: doc.update(format="hype_vector_store"),
        lambda doc: doc["records"][0].pop("parentId"),
        lambda doc: doc["records"][0].pop("embedding"),
        lambda doc: doc["records"][0].update(embedding=[0.1, 0.2]),
        lambda doc: doc["records"][0].update(embedding=[0.1, "x", 0.3]),
        lambda doc: doc["records"][0].update(sequence=-1),
        lambda doc: doc["records"][0].update(sequence="0"),
        lambda doc: doc["records"][0].update(id=7),
        lambda doc: doc["records"][0].update(metadata={"nested": {"a": 1}}),
        lambda doc: doc["records"][0].update(metadata=[]),
    ],
)
def test_decode_vector_store_rejects_schema_violations(vector_document, mutate):
    """Test that every schema violation raises CorruptIndexError."""
    mutate(vector_document)

    with pytest.raises(CorruptIndexError):
        codec.decode_vector_store(vector_document)


def test_decode_rejects_non_object():
    """Test that a top-level list is rejected."""
    with pytest.raises(CorruptIndexError):
        codec.decode_vector_store([])


@pytest.mark.parametrize(
    "embeddings",
    [
        [],
        None,
        [{"vector": [1.0, 0.0]}],
        [{"vector": [1.0, 0.0], "label": 3}],
        [{"label": "no vector"}],
        [{"vector": [1.0], "label": "short"}],
    ],
)
def test_decode_hype_store_rejects_bad_embeddings(hype_document, embeddings):
    """Test that malformed embedding lists are rejected."""
    hype_document["records"][0]["embeddings"] = embeddings

    with pytest.raises(CorruptIndexError):
        codec.decode_hype_store(hype_document)


# File I/O tests


def test_write_document_creates_parents(tmp_path, vector_document):
    """Test writing into a directory that does not exist yet."""
    target = tmp_path / "nested" / "dir" / "index.json"

    written = codec.write_document(vector_document, target)

    assert written == target.resolve()
    assert json.loads(target.read_text(encoding="utf-8")) == vector_document


def test_write_document_leaves_no_temp_files(tmp_path, vector_document):
    """Test that only the target file remains after a write."""
    target = tmp_path / "index.json"

    codec.write_document(vector_document, target)
    codec.write_document(vector_document, target)

    assert [path.name for path in tmp_path.iterdir()] == ["index.json"]


def test_write_document_failure_keeps_previous_file(tmp_path, vector_document):
    """Test that a failed write leaves the existing index untouched."""
    target = tmp_path / "index.json"
    codec.write_document(vector_document, target)
    before = target.read_text(encoding="utf-8")

    with pytest.raises(ValueError):
        codec.write_document({"bad": float("nan")}, target)

    assert target.read_text(encoding="utf-8") == before
    assert [path.name for path in tmp_path.iterdir()] == ["index.json"]


def test_write_document_keeps_unicode(tmp_path):
    """Test that non-ASCII content is written as-is."""
    unicode_chunk = TextChunk(
        id="c", parent_id="p", content="Índice ñandú 日本", sequence=0
    )
    document = codec.encode_vector_store(
        1, [VectorRecord(chunk=unicode_chunk, embedding=(1.0,))]
    )
    target = tmp_path / "index.json"

    codec.write_document(document, target)

    assert "Índice ñandú 日本" in target.read_text(encoding="utf-8")


def test_read_document_missing_file(tmp_path):
    """Test that a missing index raises IndexNotFoundError."""
    with pytest.raises(IndexNotFoundError) as exc_info:
        codec.read_document(tmp_path / "missing.json")

    assert isinstance(exc_info.value, FileNotFoundError)


def test_read_document_invalid_json(tmp_path):
    """Test that unparseable JSON raises CorruptIndexError."""
    target = tmp_path / "index.json"
    target.write_text("{not json", encoding="utf-8")

    with pytest.raises(CorruptIndexError):
        codec.read_document(target)
