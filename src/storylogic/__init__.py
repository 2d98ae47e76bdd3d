"""StoryLogic: static validation for visual-novel logic graphs."""

__version__ = "0.1.0"
