"""HTML parsing and content extraction."""
