"""
backends/numpy_backend.py — the NLL model with NumPy.

Same model, same update rule as the scalar graph. What changes:
  • All ops run on full [N, V] matrices.
  • The gradient is derived analytically instead of by walking a graph.

Notation:
  N = number of training pairs
  V = vocab_size
"""

import numpy as np


class LinearSoftmaxNumpy:

    def __init__(self, xs, ys, vocab_size, w):
        self.V  = vocab_size
        self.X  = np.zeros((len(xs), vocab_size), dtype=np.float64)   # [N, V]
        self.X[np.arange(len(xs)), xs] = 1.0
        self.ys = np.asarray(ys, dtype=np.intp)                       # [N]
        self.W  = np.array(w, dtype=np.float64)                       # [V, V]

        self._probs = None
        self._loss  = self._forward()

    @staticmethod
    def _softmax(x):
        """Numerically stable softmax over last axis."""
        e = np.exp(x - x.max(axis=-1, keepdims=True))
        return e / e.sum(axis=-1, keepdims=True)

    def _forward(self):
        N           = len(self.ys)
        logits      = self.X @ self.W                                 # [N, V]
        self._probs = self._softmax(logits)
        return float(-np.log(self._probs[np.arange(N), self.ys]).mean())

    def _backward(self):
        """
        Softmax + NLL have a clean combined gradient:

          dL/dlogit[i, j] = (prob[i, j] - 1{j == y_i}) / N

        and logits = X @ W, so dL/dW = X.T @ dL/dlogits.
        """
        N        = len(self.ys)
        dlogits  = self._probs.copy()
        dlogits[np.arange(N), self.ys] -= 1.0
        dlogits /= N
        return self.X.T @ dlogits                                     # [V, V]

    @property
    def loss(self) -> float:
        return self._loss

    def weight_matrix(self):
        return self.W.tolist()

    def train_step(self, lr: float) -> float:
        self.W    -= lr * self._backward()
        self._loss = self._forward()
        return self._loss
