"""
Character proxy service package.

The service fronts a public character API and, in its cached variant,
reads through Redis before going upstream.

Structure:
- app.main: FastAPI app, routes, and lifecycle wiring.
- app.adapters: HTTP client for the upstream character API.
- app.caching: Cache-aside store backed by Redis.
"""
