"""Crypto market and DeFi analytics tools for LLM research agents."""

__version__ = "0.1.0"
