"""Auto-compounder yield accounting engine."""

__version__ = "0.3.0"
