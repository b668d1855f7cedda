"""Specialist - dynamic prompt composition for agent benchmarking."""

__version__ = "0.3.0"
