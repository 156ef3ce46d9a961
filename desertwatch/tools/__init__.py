"""Deterministic helpers (geo distance, region centroids) used by views and filters."""
