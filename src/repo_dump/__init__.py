"""
Repo-Dump: Flatten a repository into a single LLM-friendly text stream.

Walks a directory tree, honours .aiignore and (nested) .gitignore files, skips
binary content, and writes every remaining file as a delimited section.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
