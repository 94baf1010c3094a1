"""Wispy utilities: the HTML sanitizer and its policy tables."""
