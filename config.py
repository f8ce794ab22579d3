"""Run configuration shared by the CLI and the benchmark."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class RunConfig:
    # Data
    filename: str = "names.txt"
    max_examples: Optional[int] = 200
    download: bool = False

    # Training
    epochs: int = 100
    learning_rate: float = 0.1
    init_low: float = -1.0
    init_high: float = 1.0
    log_every: int = 10

    # Sampling
    seed: int = 10
    samples: int = 10
    max_length: int = 64

    def validate(self) -> "RunConfig":
        if self.epochs < 0:
            raise ValueError(f"epochs must be >= 0, got {self.epochs}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be > 0, got {self.learning_rate}")
        if self.max_examples is not None and self.max_examples < 1:
            raise ValueError(f"max_examples must be >= 1, got {self.max_examples}")
        if self.samples < 0:
            raise ValueError(f"samples must be >= 0, got {self.samples}")
        if self.max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {self.max_length}")
        if self.init_low >= self.init_high:
            raise ValueError(
                f"init range is empty: init_low={self.init_low} >= init_high={self.init_high}"
            )
        if self.log_every < 0:
            raise ValueError(f"log_every must be >= 0, got {self.log_every}")
        return self
