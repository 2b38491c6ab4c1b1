"""FastAPI application assembly: factory, lifespan, routers and error handlers."""
