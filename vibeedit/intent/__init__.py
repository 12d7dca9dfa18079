"""Intent classification."""

from .classifier import IntentClassifier, TextGenerator

__all__ = ["IntentClassifier", "TextGenerator"]
