"""
Cosine similarity scoring and ranking.

Exact (brute-force) similarity used by both vector stores. Scores are
plain Python floats in [-1.0, 1.0]; a zero vector scores 0.0 against
anything, so degenerate embeddings never break ranking.
"""

from collections.abc import Hashable, Sequence
from typing import TypeVar

import numpy as np

from .exceptions import DimensionMismatchError

K = TypeVar("K", bound=Hashable)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute the cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| * |b|), or 0.0 if either vector has zero norm

    Raises:
        DimensionMismatchError: If the vectors have different lengths
    """
    if len(a) != len(b):
        raise DimensionMismatchError(
            len(a), len(b), f"Vector dimensions must match: {len(a)} != {len(b)}"
        )

    vec_a = _rescale(np.asarray(a, dtype=np.float64))
    vec_b = _rescale(np.asarray(b, dtype=np.float64))

    norm_a = float(np.sqrt(np.dot(vec_a, vec_a)))
    norm_b = float(np.sqrt(np.dot(vec_b, vec_b)))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(vec_a, vec_b)) / (norm_a * norm_b)
    return min(1.0, max(-1.0, score))


def cosine_scores(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """
    Compute the cosine similarity of a query against every row of a matrix.

    Args:
        query: Query vector of length d
        matrix: Array of shape (n, d)

    Returns:
        Array of n scores following the same conventions as cosine_similarity
    """
    query_vec = np.asarray(query, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] != query_vec.shape[0]:
        expected = matrix.shape[1] if matrix.ndim == 2 else 0
        raise DimensionMismatchError(
            expected,
            query_vec.shape[0],
            f"Query embedding dimension ({query_vec.shape[0]}) doesn't match "
            f"store dimension ({expected})",
        )
    if matrix.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)

    query_vec = _rescale(query_vec)
    rows = _rescale_rows(matrix.astype(np.float64, copy=False))

    query_norm = np.sqrt(np.dot(query_vec, query_vec))
    row_norms = np.sqrt(np.einsum("ij,ij->i", rows, rows))
    denominators = row_norms * query_norm

    scores = np.zeros(rows.shape[0], dtype=np.float64)
    nonzero = denominators > 0
    scores[nonzero] = (rows[nonzero] @ query_vec) / denominators[nonzero]
    return np.clip(scores, -1.0, 1.0)


def ranked_indices(scores: np.ndarray, top_k: int | None = None) -> list[int]:
    """
    Order score positions by descending score.

    Equal scores keep their original relative order, so the ranking is
    deterministic for identical inputs.

    Args:
        scores: One score per candidate
        top_k: Maximum number of positions to return (None for all)

    Returns:
        Candidate positions, best first
    """
    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable")
    if top_k is not None:
        order = order[:top_k]
    return [int(i) for i in order]


def rank(
    query: Sequence[float],
    candidates: Sequence[tuple[K, Sequence[float]]],
    top_k: int | None = None,
) -> list[tuple[K, float]]:
    """
    Rank keyed candidate embeddings against a query.

    Args:
        query: Query vector
        candidates: (key, embedding) pairs, in insertion order
        top_k: Maximum number of results; larger than the candidate count
            simply returns every candidate

    Returns:
        (key, score) pairs sorted by descending score, ties in candidate order
    """
    if top_k is not None and top_k <= 0:
        raise ValueError(f"top_k must be positive, got {top_k}")
    if not candidates:
        return []

    keys = [key for key, _ in candidates]
    for _, embedding in candidates:
        if len(embedding) != len(query):
            raise DimensionMismatchError(len(query), len(embedding))

    matrix = np.asarray([embedding for _, embedding in candidates], dtype=np.float64)
    scores = cosine_scores(query, matrix)

    return [(keys[i], float(scores[i])) for i in ranked_indices(scores, top_k)]


def _rescale(vector: np.ndarray) -> np.ndarray:
    """Divide by the largest absolute component so squaring cannot overflow."""
    peak = np.max(np.abs(vector)) if vector.size else 0.0
    if peak == 0.0 or not np.isfinite(peak):
        return vector
    return vector / peak


def _rescale_rows(matrix: np.ndarray) -> np.ndarray:
    """Row-wise version of _rescale."""
    peaks = np.max(np.abs(matrix), axis=1, keepdims=True)
    peaks[peaks == 0.0] = 1.0
    return matrix / peaks
