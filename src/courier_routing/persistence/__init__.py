"""Storage backends for routes and saved locations."""
