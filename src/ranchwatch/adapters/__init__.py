"""Adapters connecting ranchwatch to frameworks, storage and stdlib logging."""
