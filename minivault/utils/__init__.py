"""Configuration, storage and backup helpers."""
