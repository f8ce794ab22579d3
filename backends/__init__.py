"""Interchangeable trainers for the single-layer NLL model."""
