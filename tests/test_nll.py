import math

import numpy as np
import pytest

from data import build_dataset
from engine import Value
from nll import (
    build_average_nll,
    build_graph,
    init_weights,
    mat_mul,
    one_hot,
    softmax,
    train_loop,
    weight_nodes,
)


def reference_loss(xs, ys, w):
    logits = np.asarray(w)[xs]
    probs  = np.exp(logits) / np.exp(logits).sum(axis=1, keepdims=True)
    return float(-np.log(probs[np.arange(len(ys)), ys]).mean())


def test_one_hot():
    enc = one_hot([0, 2, 1], 4)
    assert enc.shape == (3, 4)
    assert (enc.sum(axis=1) == 1.0).all()
    assert list(enc.argmax(axis=1)) == [0, 2, 1]


def test_one_hot_argmax_round_trip():
    n = 27
    enc = one_hot(range(n), n)
    assert list(enc.argmax(axis=1)) == list(range(n))


def test_one_hot_out_of_range():
    with pytest.raises(IndexError):
        one_hot([0, 3], 3)
    with pytest.raises(IndexError):
        one_hot([-1], 3)


def test_init_weights_bounds_and_seed():
    w = init_weights(5, np.random.default_rng(0))
    assert w.shape == (5, 5)
    assert (w >= -1.0).all() and (w <= 1.0).all()
    assert (w == init_weights(5, np.random.default_rng(0))).all()


def test_mat_mul_selects_weight_row():
    w = np.arange(9, dtype=float).reshape(3, 3)
    logits = mat_mul(one_hot([2, 0], 3), weight_nodes(w))
    assert [[v.data for v in row] for row in logits] == [[6.0, 7.0, 8.0], [0.0, 1.0, 2.0]]


def test_softmax_rows_are_distributions():
    logits = [[Value(0.1), Value(-0.3), Value(2.0)], [Value(0.0), Value(0.0), Value(0.0)]]
    probs = softmax(logits)
    for row in probs:
        assert sum(p.data for p in row) == pytest.approx(1.0)
    assert [p.data for p in probs[1]] == pytest.approx([1 / 3] * 3)


def test_average_nll_of_uniform_predictions():
    probs = [[Value(0.5), Value(0.5)], [Value(0.5), Value(0.5)]]
    loss = build_average_nll(probs, [0, 1])
    assert loss.data == pytest.approx(math.log(2))
    assert loss.label == "average_nll"


def test_average_nll_needs_examples():
    with pytest.raises(ValueError):
        build_average_nll([], [])


def test_graph_loss_matches_numpy():
    xs, ys, vocab = build_dataset(["emma", "ava"])
    w = init_weights(len(vocab), np.random.default_rng(1))
    weights, loss = build_graph(xs, ys, len(vocab), w)

    assert len(weights) == len(vocab)
    assert len(loss.leaves()) == len(vocab) ** 2
    assert loss.data == pytest.approx(reference_loss(xs, ys, w))
    assert math.isfinite(loss.data) and loss.data > 0


def test_training_lowers_the_loss():
    xs, ys, vocab = build_dataset(["ab"] * 3)
    w = init_weights(len(vocab), np.random.default_rng(2))
    weights, loss = build_graph(xs, ys, len(vocab), w)

    before = loss.data
    losses = train_loop(loss, epochs=20, learning_rate=0.5)

    assert len(losses) == 20
    assert losses[-1] == loss.data
    assert loss.data < before
    assert all(b < a for a, b in zip(losses, losses[1:]))
    current = [[v.data for v in row] for row in weights]
    assert loss.data == pytest.approx(reference_loss(xs, ys, current))


def test_zero_epochs_leaves_graph_untouched():
    xs, ys, vocab = build_dataset(["ab"])
    _, loss = build_graph(xs, ys, len(vocab), init_weights(len(vocab), np.random.default_rng(3)))
    before = loss.data
    assert train_loop(loss, epochs=0, learning_rate=0.1) == []
    assert loss.data == before


def test_train_loop_reports_progress(capsys):
    xs, ys, vocab = build_dataset(["ab"])
    _, loss = build_graph(xs, ys, len(vocab), init_weights(len(vocab), np.random.default_rng(4)))
    train_loop(loss, epochs=4, learning_rate=0.1, log_every=2)
    out = capsys.readouterr().out
    assert out.count("loss") == 3
    assert "epoch     4/4" in out


class TaggedValue(Value):
    """A leaf type standing in for the default engine node."""

    created = 0

    def __init__(self, data, **kwargs):
        super().__init__(data, **kwargs)
        TaggedValue.created += 1


def test_build_graph_accepts_another_leaf_type():
    xs, ys, vocab = build_dataset(["ab"])
    w = init_weights(len(vocab), np.random.default_rng(5))

    before = TaggedValue.created
    weights, loss = build_graph(xs, ys, len(vocab), w, leaf=TaggedValue)

    assert TaggedValue.created - before == len(vocab) ** 2
    assert all(isinstance(v, TaggedValue) for row in weights for v in row)
    assert {id(v) for v in loss.leaves()} == {id(v) for row in weights for v in row}
    assert loss.data == pytest.approx(reference_loss(xs, ys, w))

    train_loop(loss, epochs=3, learning_rate=0.5)
    current = [[v.data for v in row] for row in weights]
    assert loss.data == pytest.approx(reference_loss(xs, ys, current))


def test_train_loop_stops_on_non_finite_loss():
    w = Value(1e308)
    loss = w * -1.0
    with pytest.raises(RuntimeError, match="non-finite"):
        train_loop(loss, epochs=2, learning_rate=1e308)
