"""YAML loaders for statement definitions and the run configuration."""
