import numpy as np
import pytest

from backends.numpy_backend import LinearSoftmaxNumpy
from backends.scalar import LinearSoftmaxScalar
from data import build_dataset
from nll import init_weights

NAMES = ["emma", "olivia", "ava"]


def setup_data(seed=0):
    xs, ys, vocab = build_dataset(NAMES)
    w = init_weights(len(vocab), np.random.default_rng(seed))
    return xs, ys, len(vocab), w


def test_numpy_matches_scalar_trajectory():
    xs, ys, V, w = setup_data()
    scalar = LinearSoftmaxScalar(xs, ys, V, w)
    numpy_ = LinearSoftmaxNumpy(xs, ys, V, w)

    assert numpy_.loss == pytest.approx(scalar.loss, abs=1e-9)
    for _ in range(5):
        assert numpy_.train_step(0.5) == pytest.approx(scalar.train_step(0.5), abs=1e-9)
    assert np.allclose(numpy_.weight_matrix(), scalar.weight_matrix(), atol=1e-9)


def test_backends_do_not_mutate_initial_weights():
    xs, ys, V, w = setup_data()
    original = w.copy()
    LinearSoftmaxNumpy(xs, ys, V, w).train_step(1.0)
    LinearSoftmaxScalar(xs, ys, V, w).train_step(1.0)
    assert (w == original).all()


def test_torch_matches_numpy():
    pytest.importorskip("torch")
    from backends.torch_backend import LinearSoftmaxTorch

    xs, ys, V, w = setup_data(seed=1)
    torch_ = LinearSoftmaxTorch(xs, ys, V, w)
    numpy_ = LinearSoftmaxNumpy(xs, ys, V, w)

    assert torch_.loss == pytest.approx(numpy_.loss, abs=1e-9)
    for _ in range(5):
        assert torch_.train_step(0.5) == pytest.approx(numpy_.train_step(0.5), abs=1e-9)
