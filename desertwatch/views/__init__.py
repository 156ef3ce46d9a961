"""Stateless view builders over the dashboard session (grid, map, document, summary)."""
