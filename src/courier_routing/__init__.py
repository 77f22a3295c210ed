"""Courier route optimization, lifecycle tracking and geospatial queries."""
