"""
bigram.py — bigram language model trained by counting.

counts[i][j] = how many times token j followed token i in the corpus.
Generation walks the table from the boundary token, drawing each next
token with probability proportional to its count, until the boundary
token comes up again.
"""

import math

import numpy as np

from data import frame
from vocabulary import BOUNDARY, VOCAB_SIZE, Vocabulary

DEFAULT_SEED       = 10
DEFAULT_MAX_LENGTH = 64


class BigramModel:
    """
    Count table over vocabulary ids plus a private seeded random source.

    capacity : int or None
        Side of the square count matrix. With an int, any token id beyond
        the bound is fatal. With None the matrix grows with the vocabulary.
    """

    def __init__(self, rng=None, seed=DEFAULT_SEED, capacity=VOCAB_SIZE):
        self.vocabulary = Vocabulary([BOUNDARY])
        self.rng        = rng if rng is not None else np.random.default_rng(seed)
        self.capacity   = capacity
        size            = capacity if capacity is not None else len(self.vocabulary)
        self._counts    = np.zeros((size, size), dtype=np.int64)

    # ── ingestion ─────────────────────────────────────────────────────────────

    def _resolve(self, token) -> int:
        n = len(self.vocabulary)
        if self.capacity is not None and not self.vocabulary.has_token(token) and n >= self.capacity:
            raise IndexError(
                f"token id out of bounds: {token!r} -> {n} "
                f"(capacity {self.capacity})"
            )
        idx = self.vocabulary.add_token(token)
        if self.capacity is None:
            self._grow(idx + 1)
        return idx

    def _grow(self, size):
        old = self._counts.shape[0]
        if size > old:
            self._counts = np.pad(self._counts, ((0, size - old), (0, size - old)))

    def increment(self, prev, nxt) -> None:
        """Record one observed transition prev -> nxt."""
        i = self._resolve(prev)
        j = self._resolve(nxt)
        self._counts[i, j] += 1

    def ingest(self, line: str) -> None:
        tokens = frame(line)
        for prev, nxt in zip(tokens, tokens[1:]):
            self.increment(prev, nxt)

    # ── views ─────────────────────────────────────────────────────────────────

    @property
    def frequencies(self):
        """Count matrix restricted to the tokens seen so far."""
        n = len(self.vocabulary)
        return self._counts[:n, :n]

    def count(self, prev, nxt) -> int:
        i = self.vocabulary.token_to_id(prev)
        j = self.vocabulary.token_to_id(nxt)
        if i is None or j is None:
            return 0
        return int(self._counts[i, j])

    def probabilities(self, smoothing: float = 0.0):
        """Row-normalised counts, with `smoothing` added to every cell first."""
        p      = self.frequencies.astype(np.float64) + smoothing
        totals = p.sum(axis=1, keepdims=True)
        return np.divide(p, totals, out=np.zeros_like(p), where=totals > 0)

    def format_table(self) -> str:
        rows = []
        for i, prev in enumerate(self.vocabulary):
            cells = [
                f"{prev:1}{nxt:1}: {int(self._counts[i, j]):4} | "
                for j, nxt in enumerate(self.vocabulary)
            ]
            rows.append("".join(cells))
        return "\n".join(rows)

    def print_bigrams(self) -> None:
        print(self.format_table())

    # ── evaluation ────────────────────────────────────────────────────────────

    def average_nll(self, lines, smoothing: float = 1.0) -> float:
        """Mean -log P(next | prev) over every pair of the framed `lines`."""
        probs = self.probabilities(smoothing)
        nll   = 0.0
        n     = 0
        for line in lines:
            tokens = frame(line)
            for prev, nxt in zip(tokens, tokens[1:]):
                i = self.vocabulary.token_to_id(prev)
                j = self.vocabulary.token_to_id(nxt)
                if i is None or j is None:
                    raise KeyError(f"bigram {prev!r}{nxt!r} uses a token not in the vocabulary")
                p    = probs[i, j]
                nll -= math.log(p) if p > 0 else -math.inf
                n   += 1
        return nll / max(n, 1)

    # ── generation ────────────────────────────────────────────────────────────

    def _sample_id(self, idx) -> int:
        row   = self.frequencies[idx]
        total = row.sum()
        if total == 0:
            token = self.vocabulary.id_to_token(idx)
            raise RuntimeError(f"no observed transitions from token {token!r}")
        return int(self.rng.choice(len(row), p=row / total))

    def sample_next(self, token):
        """Draw the next token with probability proportional to its count."""
        idx = self.vocabulary.token_to_id(token)
        if idx is None:
            raise KeyError(f"token not in vocabulary: {token!r}")
        return self.vocabulary.id_to_token(self._sample_id(idx))

    def generate(self, max_length: int = DEFAULT_MAX_LENGTH) -> str:
        """
        Sample one line, starting after the boundary token and stopping as
        soon as the boundary token is drawn (it is never emitted).
        """
        boundary = self.vocabulary.token_to_id(BOUNDARY)
        ids      = []
        idx      = boundary
        for _ in range(max_length + 1):
            idx = self._sample_id(idx)
            if idx == boundary:
                return self.vocabulary.decode(ids)
            ids.append(idx)
        raise RuntimeError(
            f"generation reached {max_length} tokens without sampling the boundary token"
        )


def count_frequencies(lines, rng=None, seed=DEFAULT_SEED, capacity=VOCAB_SIZE):
    """Build a BigramModel from every adjacent token pair of `lines`."""
    model = BigramModel(rng=rng, seed=seed, capacity=capacity)
    for line in lines:
        model.ingest(line)
    return model
