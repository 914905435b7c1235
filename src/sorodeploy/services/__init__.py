"""Adapters for the external tools driven by the pipeline."""
from .soroban import SorobanCLI, parse_listing

__all__ = ["SorobanCLI", "parse_listing"]
