"""gitx: publish, push and pull a project directory to its forge repository."""

__version__ = "0.1.0"
