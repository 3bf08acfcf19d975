"""storybeat - topic to beat-by-beat video plan composition engine."""

__version__ = "0.1.0"
