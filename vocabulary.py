"""
vocabulary.py — bidirectional token <-> id mapping.

Ids are dense integers assigned in first-seen order, starting at 0.
A single boundary token marks both the start and the end of a line
(the same single-special-token design as the names dataset loader).
"""

BOUNDARY   = "."
# 26 lowercase letters + boundary
VOCAB_SIZE = 27


class Vocabulary:
    """Append-only token table. The two maps are exact inverses at all times."""

    def __init__(self, tokens=()):
        self._stoi   = {}
        self._itos   = {}
        self.next_id = 0
        for token in tokens:
            self.add_token(token)

    def __len__(self):
        return self.next_id

    def __contains__(self, token):
        return self.has_token(token)

    def __iter__(self):
        """Tokens in id order."""
        return (self._itos[i] for i in range(self.next_id))

    def has_token(self, token) -> bool:
        return token in self._stoi

    def token_to_id(self, token):
        """Id of `token`, or None when it was never added."""
        return self._stoi.get(token)

    def id_to_token(self, idx):
        """Token for `idx`, or None when no token has that id."""
        return self._itos.get(idx)

    def add_token(self, token) -> int:
        """Return the id of `token`, assigning the next free id if it is new."""
        idx = self._stoi.get(token)
        if idx is not None:
            return idx
        idx = self.next_id
        self._stoi[token] = idx
        self._itos[idx]   = token
        self.next_id     += 1
        return idx

    def decode(self, ids):
        """Join the tokens for `ids`, dropping the boundary token."""
        return "".join(self._itos[i] for i in ids if self._itos[i] != BOUNDARY)
