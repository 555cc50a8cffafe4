"""covgate: lcov coverage threshold gate for CI pipelines."""

__version__ = "0.1.0"
