"""Core components: Markdown conversion and vault backends."""
