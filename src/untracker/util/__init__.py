"""Configuration, naming and small file helpers."""
