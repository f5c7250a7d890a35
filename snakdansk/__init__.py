"""SnakDansk - spoken Danish conversation practice."""

__version__ = "0.1.0"
