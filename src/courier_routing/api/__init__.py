"""HTTP layer: application routers, dependencies and error mapping."""
