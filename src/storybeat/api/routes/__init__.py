"""API route modules."""

from storybeat.api.routes import compose, health, projects

__all__ = ["compose", "health", "projects"]
