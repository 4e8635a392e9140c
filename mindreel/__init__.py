"""MindReel: periodic work-journal prompts, local storage and ISO-week grouping."""

__version__ = "1.0.0"
