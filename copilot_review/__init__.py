"""co-pilot-review: AI-assisted code review through a chat interface."""

__version__ = "1.2.0"
