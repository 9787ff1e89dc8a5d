# site_audit/parser/__init__.py
"""Parsers for sitemap XML and rendered HTML."""
