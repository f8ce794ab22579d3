"""
backends/scalar.py — the NLL model on the scalar autograd graph.

Every weight, logit and probability is its own Value node; one training
step is a backward pass over the whole graph followed by a bottom-up
re-evaluation. This is the reference the other backends are measured
against.
"""

from nll import build_graph


class LinearSoftmaxScalar:

    def __init__(self, xs, ys, vocab_size, w):
        self.vocab_size = vocab_size
        self.weights, self._loss = build_graph(xs, ys, vocab_size, w)

    @property
    def loss(self) -> float:
        return self._loss.data

    def weight_matrix(self):
        return [[v.data for v in row] for row in self.weights]

    def train_step(self, lr: float) -> float:
        """Gradient step + recompute. Returns the updated loss."""
        self._loss.learn(lr)
        self._loss.recalculate()
        return self._loss.data
