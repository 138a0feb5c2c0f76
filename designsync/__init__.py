"""designsync: design token normalization and platform code generation."""

__version__ = "0.1.0"
