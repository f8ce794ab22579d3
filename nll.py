"""
nll.py — single linear layer + softmax, trained against average NLL.

The whole model lives in one computation graph:

  xenc [N, V] one-hot rows  ──►  logits[i][j] = Σ_k xenc[i][k] * W[k][j]
                             ──►  probs = softmax(logits[i])
                             ──►  loss  = -(1/N) Σ_i log probs[i][ys[i]]

Every element is a graph node so the loss can be differentiated back to
each of the V*V weights. Training repeats: gradient step on the loss,
then re-evaluate the graph with the updated weights.
"""

import math
import time

import numpy as np

from engine import Value


# ── encoding ──────────────────────────────────────────────────────────────────

def one_hot(ids, vocab_size: int):
    """[N] ids → [N, V] float matrix with a single 1.0 per row."""
    ids = np.asarray(ids, dtype=np.intp)
    if ids.size and (ids.min() < 0 or ids.max() >= vocab_size):
        bad = ids[(ids < 0) | (ids >= vocab_size)][0]
        raise IndexError(f"id {bad} out of range for vocabulary size {vocab_size}")
    enc = np.zeros((len(ids), vocab_size), dtype=np.float64)
    enc[np.arange(len(ids)), ids] = 1.0
    return enc


# ── parameters ────────────────────────────────────────────────────────────────

def init_weights(vocab_size: int, rng, low: float = -1.0, high: float = 1.0):
    """[V, V] weights drawn independently from U[low, high]."""
    return rng.uniform(low, high, size=(vocab_size, vocab_size))


def weight_nodes(w, leaf=Value):
    """Wrap a numeric [V, V] matrix into a grid of trainable leaf nodes."""
    return [
        [leaf(float(w[k][j]), label=f"w_{k}_{j}") for j in range(len(w[k]))]
        for k in range(len(w))
    ]


# ── graph construction ────────────────────────────────────────────────────────

def mat_mul(xenc, w):
    """logits[i][j] = Σ_k xenc[i][k] * w[k][j], one graph node per cell."""
    n_out = len(w[0])
    logits = []
    for row in xenc:
        x = [float(v) for v in row]
        logits.append([
            sum(xk * w[k][j] for k, xk in enumerate(x))
            for j in range(n_out)
        ])
    return logits


def softmax(logits):
    """
    Row-wise softmax built from exp, sum and divide nodes.

    No max-subtraction: very large logits overflow math.exp.
    """
    probs = []
    for row in logits:
        exps = [logit.exp() for logit in row]
        total = sum(exps)
        probs.append([e / total for e in exps])
    return probs


def build_average_nll(probs, ys):
    """-(1/N) Σ_i log probs[i][ys[i]] as a single root node."""
    n = len(probs)
    if n == 0:
        raise ValueError("cannot build a loss over zero examples")

    total = Value(0.0, learnable=False)
    for i, (row, y) in enumerate(zip(probs, ys)):
        log_likelihood = row[y].log(f"log_likelihood_{i}")
        nll            = log_likelihood.neg(f"loss_{i}")
        total          = total + nll

    average_nll       = total / n
    average_nll.label = "average_nll"
    return average_nll


def build_graph(xs, ys, vocab_size: int, w, leaf=Value):
    """
    Assemble the full model graph for the training pairs (xs, ys).

    Returns (weights, loss): the [V, V] grid of leaf nodes and the
    average NLL root node.
    """
    xenc    = one_hot(xs, vocab_size)
    weights = weight_nodes(w, leaf=leaf)
    logits  = mat_mul(xenc, weights)
    probs   = softmax(logits)
    loss    = build_average_nll(probs, ys)
    return weights, loss


# ── training loop ─────────────────────────────────────────────────────────────

def train_loop(loss, epochs: int, learning_rate: float, log_every: int = 0):
    """
    Run exactly `epochs` gradient steps on `loss`, re-evaluating the graph
    after each one. Returns the loss after every step.
    """
    losses = []
    for epoch in range(epochs):
        t0 = time.perf_counter()
        loss.learn(learning_rate)
        loss.recalculate()
        t1 = time.perf_counter()

        if not math.isfinite(loss.data):
            raise RuntimeError(f"loss became non-finite at epoch {epoch+1}: {loss.data}")
        losses.append(loss.data)

        if log_every and ((epoch + 1) % log_every == 0 or epoch == 0):
            ms = (t1 - t0) * 1000
            print(f"  epoch {epoch+1:5d}/{epochs}  |  loss {loss.data:.4f}  |  {ms:8.2f} ms")

    return losses
