"""CLI module for kbaserpc."""
