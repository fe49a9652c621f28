"""Adapters: infrastructure implementations of core protocols."""
