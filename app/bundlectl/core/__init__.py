"""Core infrastructure for bundlectl: paths, settings and theming."""
