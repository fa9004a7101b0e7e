"""HTTP surface for the catalog engine."""
