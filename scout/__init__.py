"""scout -- bilingual grounded web research."""

__version__ = "0.1.0"
