"""Service layer: routing, lifecycle, geospatial lookups and caching."""
