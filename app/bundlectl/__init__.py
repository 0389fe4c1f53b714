"""bundlectl - Selective file collection for support bundles."""

__version__ = "0.1.0"
