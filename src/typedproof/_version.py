"""
Version of the typedproof distribution.

Kept in its own module so packaging and the CLI can read it without importing
the rest of the package.
"""

__version__ = "0.1.0"
