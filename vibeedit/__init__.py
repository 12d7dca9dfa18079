"""Surgical, diff-based editing of markup documents."""

__version__ = "0.1.0"
