"""Recovery Simulator — educational macOS recovery walkthroughs."""

__version__ = "0.1.0"
