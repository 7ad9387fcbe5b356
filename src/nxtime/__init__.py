"""nxtime — run a command N times and report its timing statistics."""

__version__ = "0.1.0"
