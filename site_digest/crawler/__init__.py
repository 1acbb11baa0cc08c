"""Fetching, link discovery and crawl orchestration."""
