"""Text editor building blocks: characters, splits, syntax highlighting and syntax tools."""

__version__ = "0.1.0"

__all__ = ["chars", "util", "splits", "syntax", "highlighter", "nanorc", "buildinfo"]