"""strict-migrate: widen strictNullChecks coverage one dependency cluster at a time."""

__version__ = "0.1.0"
