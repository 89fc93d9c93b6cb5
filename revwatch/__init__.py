"""revwatch: watch a text file and browse the history of its contents."""

__version__ = "0.1.0"
