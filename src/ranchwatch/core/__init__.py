"""Framework-independent core: models, metrics, formatting and the logger."""
