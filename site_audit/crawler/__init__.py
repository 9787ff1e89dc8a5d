# site_audit/crawler/__init__.py
"""HTTP layer: fetcher with retry and the bounded worker pool."""
