"""Durable workflow core: event history, deterministic coroutines and storage backends."""

__version__ = "0.1.0"