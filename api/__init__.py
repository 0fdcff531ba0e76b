"""API layer - routers, dependencies, envelope helpers and middleware."""
