"""Rule-based academic assistant for the student portal chat widget."""

__version__ = "0.1.0"
