"""
Application wiring: CORS, lifespan, exception handlers.
"""
