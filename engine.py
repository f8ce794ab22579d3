"""
engine.py — scalar autograd engine with in-place re-evaluation.

A Value is one node of a computation graph. Arithmetic on Values builds
new nodes and records the operation, so the whole graph can be

  • differentiated      (backward)
  • stepped             (learn:        leaf.data -= lr * leaf.grad)
  • re-evaluated        (recalculate:  recompute every cached .data bottom-up
                         after the leaves changed, without rebuilding)

The graph builder in nll.py only relies on these operators plus `.data`,
`learn()` and `recalculate()`, so any node type offering the same surface
can stand in for it.
"""

import math


# ── forward rules ─────────────────────────────────────────────────────────────

def _log(a):
    if a <= 0:
        raise ValueError(f"log of non-positive value {a!r}: probability underflowed to 0")
    return math.log(a)


def _exp(a):
    try:
        return math.exp(a)
    except OverflowError:
        raise OverflowError(f"exp({a:.6g}) overflows a float: logits diverged") from None


# op -> (value(children data, exponent), local grads(children data, exponent))

_RULES = {
    "+":   (lambda a, b, k: a + b,       lambda a, b, k: (1.0, 1.0)),
    "*":   (lambda a, b, k: a * b,       lambda a, b, k: (b, a)),
    "/":   (lambda a, b, k: a / b,       lambda a, b, k: (1.0 / b, -a / (b * b))),
    "neg": (lambda a, b, k: -a,          lambda a, b, k: (-1.0,)),
    "**":  (lambda a, b, k: a ** k,      lambda a, b, k: (k * a ** (k - 1),)),
    "log": (lambda a, b, k: _log(a),     lambda a, b, k: (1.0 / a,)),
    "exp": (lambda a, b, k: _exp(a),     lambda a, b, k: (_exp(a),)),
}


def _args(children):
    a = children[0].data
    b = children[1].data if len(children) > 1 else None
    return a, b


# ── autograd engine ───────────────────────────────────────────────────────────

class Value:
    """
    Stores a single scalar value, its gradient and how it was produced.

    Leaves are created directly; `learnable=False` marks a constant that
    `learn()` must not move. Plain numbers mixed into arithmetic are wrapped
    as such constants.
    """
    __slots__ = ("data", "grad", "label", "learnable", "_children", "_op", "_k", "_topo")

    def __init__(self, data, children=(), op="", label="", learnable=True, k=None):
        self.data      = float(data)
        self.grad      = 0.0
        self.label     = label
        self.learnable = learnable and not children
        self._children = children
        self._op       = op
        self._k        = k
        self._topo     = None

    def __repr__(self):
        name = f" {self.label}" if self.label else ""
        return f"Value({self.data:.6g}{name})"

    @staticmethod
    def _wrap(other):
        return other if isinstance(other, Value) else Value(other, learnable=False)

    def _apply(self, op, children, label="", k=None):
        value, _ = _RULES[op]
        return Value(value(*_args(children), k), children, op, label, k=k)

    # ── operators ─────────────────────────────────────────────────────────────

    def __add__(self, other):
        return self._apply("+", (self, self._wrap(other)))

    def __mul__(self, other):
        return self._apply("*", (self, self._wrap(other)))

    def __truediv__(self, other):
        return self._apply("/", (self, self._wrap(other)))

    def __rtruediv__(self, other):
        return self._apply("/", (self._wrap(other), self))

    def __pow__(self, k):
        return self._apply("**", (self,), k=k)

    def neg(self, label=""):
        return self._apply("neg", (self,), label)

    def log(self, label=""):
        return self._apply("log", (self,), label)

    def exp(self, label=""):
        return self._apply("exp", (self,), label)

    def __neg__(self):          return self.neg()
    def __radd__(self, other):  return self + other
    def __sub__(self, other):   return self + (-self._wrap(other))
    def __rsub__(self, other):  return self._wrap(other) + (-self)
    def __rmul__(self, other):  return self * other

    # ── graph traversal ───────────────────────────────────────────────────────

    def topo(self):
        """Every node reachable from self, children before parents."""
        if self._topo is None:
            order, seen = [], set()
            stack = [(self, False)]
            while stack:
                v, expanded = stack.pop()
                if expanded:
                    order.append(v)
                    continue
                if id(v) in seen:
                    continue
                seen.add(id(v))
                stack.append((v, True))
                for c in v._children:
                    if id(c) not in seen:
                        stack.append((c, False))
            self._topo = order
        return self._topo

    def leaves(self):
        return [v for v in self.topo() if v.learnable]

    # ── backward / update / recompute ─────────────────────────────────────────

    def backward(self):
        topo = self.topo()
        for v in topo:
            v.grad = 0.0
        self.grad = 1.0
        for v in reversed(topo):
            if not v._children:
                continue
            _, local = _RULES[v._op]
            for child, lg in zip(v._children, local(*_args(v._children), v._k)):
                child.grad += lg * v.grad

    def learn(self, learning_rate):
        """One gradient-descent step on every learnable leaf below self."""
        self.backward()
        for v in self.leaves():
            v.data -= learning_rate * v.grad

    def recalculate(self):
        """Refresh every cached value after the leaves were changed."""
        for v in self.topo():
            if v._children:
                value, _ = _RULES[v._op]
                v.data = value(*_args(v._children), v._k)
