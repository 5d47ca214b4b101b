"""Search and browse the Bun documentation."""

__version__ = "0.1.0"
