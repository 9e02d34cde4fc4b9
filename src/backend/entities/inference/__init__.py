"""Inference provider client."""

from .client import InferenceClient, parse_completion

__all__ = ["InferenceClient", "parse_completion"]
