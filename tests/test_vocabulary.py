from vocabulary import BOUNDARY, Vocabulary


def test_ids_are_dense_in_first_seen_order():
    vocab = Vocabulary()
    ids = [vocab.add_token(t) for t in "hello"]
    assert ids == [0, 1, 2, 2, 3]
    assert len(vocab) == 4
    assert list(vocab) == ["h", "e", "l", "o"]


def test_add_token_is_idempotent():
    vocab = Vocabulary([BOUNDARY])
    assert vocab.add_token("a") == 1
    assert vocab.add_token("a") == 1
    assert vocab.add_token(BOUNDARY) == 0
    assert len(vocab) == 2


def test_round_trip():
    vocab = Vocabulary([BOUNDARY, *"emma"])
    for token in [BOUNDARY, "e", "m", "a"]:
        assert vocab.id_to_token(vocab.token_to_id(token)) == token
    for idx in range(len(vocab)):
        assert vocab.token_to_id(vocab.id_to_token(idx)) == idx


def test_absent_lookups():
    vocab = Vocabulary(["x"])
    assert not vocab.has_token("y")
    assert "y" not in vocab
    assert vocab.token_to_id("y") is None
    assert vocab.id_to_token(5) is None


def test_decode_drops_boundary():
    vocab = Vocabulary([BOUNDARY, *"ab"])
    assert vocab.decode([0, 1, 2, 0]) == "ab"
    assert vocab.decode([]) == ""
