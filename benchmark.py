#!/usr/bin/env python3
"""
benchmark.py — the same single-layer NLL model, three ways.

Trains each backend for N epochs from identical initial weights, then
reports:
  • per-epoch median latency
  • total wall-clock time
  • initial and final training loss, and the final-loss gap to the scalar graph
  • speedup over the scalar graph baseline

Usage:
  python benchmark.py                           # all backends, 10 epochs
  python benchmark.py --backends scalar numpy   # selected backends only
  python benchmark.py --epochs 50 --max_examples 500
"""

import argparse
import time

import numpy as np

from config import RunConfig
from data import load_dataset
from nll import init_weights
from backends.scalar        import LinearSoftmaxScalar
from backends.numpy_backend import LinearSoftmaxNumpy
# LinearSoftmaxTorch is imported lazily inside build_backend() so that
# numpy/scalar backends still work when torch is not installed.

BACKENDS = ["scalar", "numpy", "torch_cpu", "torch_gpu"]


# ── CLI ───────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    d = RunConfig(epochs=10, log_every=5)
    p = argparse.ArgumentParser(description="single-layer NLL backend benchmark")
    p.add_argument(
        "--backends", nargs="+",
        choices=BACKENDS + ["all"],
        default=["all"],
        help="backends to run (default: all)",
    )
    p.add_argument("--filename",     type=str,   default=d.filename)
    p.add_argument("--epochs",       type=int,   default=d.epochs, help="training epochs")
    p.add_argument("--lr",           type=float, default=d.learning_rate)
    p.add_argument("--max_examples", type=int,   default=d.max_examples, help="0 = all pairs")
    p.add_argument("--seed",         type=int,   default=d.seed)
    p.add_argument("--download",     action="store_true", help="fetch names.txt if missing")
    p.add_argument(
        "--log_every", type=int, default=d.log_every,
        help="print progress every N epochs",
    )
    return p.parse_args(argv)


# ── backend factory ───────────────────────────────────────────────────────────

def build_backend(backend: str, xs, ys, vocab_size, w):
    if backend == "scalar":
        return LinearSoftmaxScalar(xs, ys, vocab_size, w)

    if backend == "numpy":
        return LinearSoftmaxNumpy(xs, ys, vocab_size, w)

    if backend in ("torch_cpu", "torch_gpu"):
        try:
            from backends.torch_backend import LinearSoftmaxTorch
        except ImportError:
            raise RuntimeError("PyTorch is not installed — cannot run torch backends")

        if backend == "torch_cpu":
            return LinearSoftmaxTorch(xs, ys, vocab_size, w, device="cpu")

        import torch
        if not torch.cuda.is_available():
            raise RuntimeError("CUDA not available — cannot run torch_gpu")
        return LinearSoftmaxTorch(xs, ys, vocab_size, w, device="cuda")

    raise ValueError(f"Unknown backend: {backend!r}")


# ── training loop ─────────────────────────────────────────────────────────────

def run_training(model, n_epochs, lr, log_every):
    """Train for n_epochs with a constant learning rate, return a results dict."""
    initial    = model.loss
    losses     = []
    step_times = []

    for epoch in range(n_epochs):
        t0   = time.perf_counter()
        loss = model.train_step(lr)
        t1   = time.perf_counter()

        losses.append(loss)
        step_times.append(t1 - t0)

        if log_every and ((epoch + 1) % log_every == 0 or epoch == 0):
            ms = (t1 - t0) * 1000
            print(f"  epoch {epoch+1:5d}/{n_epochs}  |  loss {loss:.4f}  |  {ms:8.2f} ms")

    return {
        "initial_loss": initial,
        "final_loss":   losses[-1] if losses else initial,
        "total_s":      sum(step_times),
        "median_ms":    float(np.median(step_times)) * 1000 if step_times else 0.0,
        "mean_ms":      float(np.mean(step_times))   * 1000 if step_times else 0.0,
    }


# ── results table ─────────────────────────────────────────────────────────────

def print_summary(results):
    """One row per backend; speed and loss are both relative to the scalar graph."""
    width = 84
    ref   = dict(results).get("scalar")

    print(f"\n{'=' * width}\n  BENCHMARK SUMMARY\n{'=' * width}")
    print(
        f"  {'Backend':<12}  {'Init Loss':<10}  {'Final Loss':<11}  {'|Δ scalar|':<11}"
        f"  {'Total(s)':<9}  {'Median ms':<10}  Speedup"
    )
    print("-" * width)

    for name, r in results:
        gap     = f"{abs(r['final_loss'] - ref['final_loss']):<11.2e}" if ref else f"{'—':<11}"
        speedup = f"{ref['total_s'] / r['total_s']:.1f}x" if ref and r["total_s"] > 0 else "—"
        print(
            f"  {name:<12}  {r['initial_loss']:<10.4f}  {r['final_loss']:<11.4f}  {gap}"
            f"  {r['total_s']:<9.2f}  {r['median_ms']:<10.2f}  {speedup}"
        )

    print("=" * width)


# ── main ──────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    RunConfig(
        filename      = args.filename,
        epochs        = args.epochs,
        learning_rate = args.lr,
        max_examples  = args.max_examples or None,
        seed          = args.seed,
        log_every     = args.log_every,
    ).validate()

    print("Loading dataset …")
    xs, ys, vocabulary = load_dataset(args.filename, args.max_examples or None, args.download)
    vocab_size = len(vocabulary)
    print(f"  {len(xs)} pairs  |  vocab size {vocab_size}")

    w = init_weights(vocab_size, np.random.default_rng(args.seed))

    to_run = BACKENDS if "all" in args.backends else args.backends

    results = []

    for backend in to_run:
        bar = "─" * 60
        print(f"\n{bar}")
        print(f"  Backend: {backend}")
        print(f"{bar}")

        try:
            model  = build_backend(backend, xs, ys, vocab_size, w)
            result = run_training(
                model,
                n_epochs=args.epochs,
                lr=args.lr,
                log_every=args.log_every,
            )
            results.append((backend, result))
        except RuntimeError as exc:
            print(f"  SKIPPED — {exc}")

    if results:
        print_summary(results)

    return results


if __name__ == "__main__":
    main()
