#!/usr/bin/env python3
"""
makemore.py — character-level name models from the command line.

  bigram : count adjacent-character pairs, print the table, sample names.
  nll    : train a single linear layer + softmax on the scalar graph
           against average negative log-likelihood.

Usage:
  python makemore.py bigram --filename names.txt --samples 20
  python makemore.py nll --epochs 100 --learning_rate 0.1 --max_examples 200
"""

import argparse
import sys
import time

import numpy as np

from bigram import count_frequencies
from config import RunConfig
from data import download_names, load_dataset, read_lines
from nll import build_average_nll, init_weights, mat_mul, one_hot, softmax, train_loop, weight_nodes


# ── CLI ───────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    d = RunConfig()
    p = argparse.ArgumentParser(description="character-level bigram / NLL language models")
    sub = p.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-f", "--filename", type=str, default=d.filename, help="corpus, one example per line")
    common.add_argument("--seed",     type=int, default=d.seed)
    common.add_argument("--download", action="store_true", help="fetch names.txt if the file is missing")

    b = sub.add_parser("bigram", parents=[common], help="count bigrams and sample from them")
    b.add_argument("--samples",    type=int, default=d.samples, help="strings to generate (0 = skip)")
    b.add_argument("--max_length", type=int, default=d.max_length, help="generation length cap")
    b.add_argument("--no_table",   action="store_true", help="do not print the frequency table")

    n = sub.add_parser("nll", parents=[common], help="train the single-layer NLL model")
    n.add_argument("-e", "--epochs",        type=int,   default=d.epochs)
    n.add_argument("-l", "--learning_rate", type=float, default=d.learning_rate)
    n.add_argument(
        "-m", "--max_examples", type=int, default=d.max_examples,
        help="cap on training pairs used (0 = all)",
    )
    n.add_argument("--log_every", type=int, default=d.log_every, help="print loss every N epochs")

    return p.parse_args(argv)


def to_config(args) -> RunConfig:
    cfg = RunConfig(filename=args.filename, seed=args.seed, download=args.download)
    if args.command == "bigram":
        cfg.samples    = args.samples
        cfg.max_length = args.max_length
    else:
        cfg.epochs        = args.epochs
        cfg.learning_rate = args.learning_rate
        cfg.max_examples  = args.max_examples or None
        cfg.log_every     = args.log_every
    return cfg.validate()


# ── progress ──────────────────────────────────────────────────────────────────

def run_phase(msg, fn):
    """Run fn(), announcing it before and reporting its duration after."""
    print(f"{msg} …")
    t0     = time.perf_counter()
    result = fn()
    print(f"{msg} done ({time.perf_counter() - t0:.2f}s)")
    return result


# ── commands ──────────────────────────────────────────────────────────────────

def run_bigram(cfg: RunConfig, show_table: bool = True):
    if cfg.download:
        download_names(cfg.filename)

    model = run_phase(
        "Counting bigrams",
        lambda: count_frequencies(read_lines(cfg.filename), seed=cfg.seed),
    )
    if show_table:
        model.print_bigrams()

    print(f"\nAverage NLL (add-one smoothing): {model.average_nll(read_lines(cfg.filename)):.4f}")

    if cfg.samples > 0:
        print(f"\nGenerated names ({cfg.samples} samples):")
        for _ in range(cfg.samples):
            print(f"  {model.generate(cfg.max_length)}")

    return model


def run_nll(cfg: RunConfig):
    xs, ys, vocabulary = run_phase(
        "Generating vocabulary",
        lambda: load_dataset(cfg.filename, cfg.max_examples, cfg.download),
    )
    vocab_size = len(vocabulary)
    print(f"  {len(xs)} pairs  |  vocab size {vocab_size}")

    xenc    = run_phase("One-hot encoding", lambda: one_hot(xs, vocab_size))
    rng     = np.random.default_rng(cfg.seed)
    weights = run_phase(
        "Initializing weights",
        lambda: weight_nodes(init_weights(vocab_size, rng, cfg.init_low, cfg.init_high)),
    )
    logits  = run_phase("Calculating logits", lambda: mat_mul(xenc, weights))
    probs   = run_phase("Calculating softmax", lambda: softmax(logits))
    loss    = run_phase("Calculating average NLL", lambda: build_average_nll(probs, ys))

    print(f"\nInitial loss (NLL): {loss.data:.4f}")
    losses = train_loop(loss, cfg.epochs, cfg.learning_rate, cfg.log_every)
    print(f"Final loss (NLL):   {loss.data:.4f}")

    return losses


# ── main ──────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    try:
        cfg = to_config(args)
        if args.command == "bigram":
            run_bigram(cfg, show_table=not args.no_table)
        else:
            run_nll(cfg)
    except (OSError, ArithmeticError, ValueError, RuntimeError, IndexError, KeyError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
