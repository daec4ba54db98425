"""Version information for Plato Runner."""

__version__ = "1.0.0"
