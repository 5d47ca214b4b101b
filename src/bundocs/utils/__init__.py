"""Small text and file helpers."""
