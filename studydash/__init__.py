"""Student dashboard backend: Canvas mirroring, tasks and courses over a JSON API."""

__version__ = "0.1.0"
