"""
granola_import - Import Granola notes into a Markdown vault.

Converts Granola's rich-text documents to Markdown, detects notes that were
imported before and runs selective imports with progress reporting.
"""

__version__ = "1.0.0"
