"""Host performance sampling engine with rolling history."""

__version__ = "0.1.0"
