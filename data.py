"""
data.py — corpus reading and (input id, target id) pair construction.

We use the same names.txt that Karpathy's makemore trains on: one lowercase
name per line, no header, no escaping.
Vocabulary convention: the boundary token "." is registered first and gets
id 0; characters follow in first-seen order. The boundary serves as both
start and end of every line.
"""

import os
import urllib.request

from vocabulary import BOUNDARY, Vocabulary

NAMES_URL = (
    "https://raw.githubusercontent.com/karpathy/makemore/"
    "refs/heads/master/names.txt"
)


def download_names(path: str) -> None:
    """Fetch names.txt into `path` unless the file already exists."""
    if not os.path.exists(path):
        print("Downloading names dataset …")
        urllib.request.urlretrieve(NAMES_URL, path)


def read_lines(path: str):
    """
    Stream the lines of `path` without their line terminators.

    A missing or unreadable file raises straight through to the caller.
    """
    with open(path, encoding="utf-8") as fh:
        for line in fh:
            yield line.rstrip("\r\n")


def frame(line: str):
    """The boundary-framed token sequence of a line: . c1 c2 ... cL ."""
    return [BOUNDARY, *line, BOUNDARY]


def build_dataset(lines):
    """
    Turn raw lines into index-aligned input/target id lists.

    Each line of length L contributes L + 1 pairs, produced by a sliding
    window of size 2 over its framed token sequence. New tokens are added
    to the vocabulary before their id is read.

    Returns
    -------
    xs         : list[int]   — input (previous token) ids
    ys         : list[int]   — target (current token) ids
    vocabulary : Vocabulary
    """
    vocabulary = Vocabulary([BOUNDARY])
    xs, ys     = [], []

    for line in lines:
        tokens = frame(line)
        for prev, curr in zip(tokens, tokens[1:]):
            vocabulary.add_token(curr)
            xs.append(vocabulary.token_to_id(prev))
            ys.append(vocabulary.token_to_id(curr))

    return xs, ys, vocabulary


def load_dataset(path: str, max_examples=None, download: bool = False):
    """
    Read `path` and build the training pairs, keeping at most `max_examples`.

    The vocabulary always covers the whole corpus; only the pair lists are
    truncated.
    """
    if download:
        download_names(path)

    xs, ys, vocabulary = build_dataset(read_lines(path))
    if max_examples is not None:
        xs = xs[:max_examples]
        ys = ys[:max_examples]

    return xs, ys, vocabulary
