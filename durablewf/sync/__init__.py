"""Deterministic cooperative coroutines and their synchronisation primitives."""