"""Unit tests for UXR Metrics web route modules.

Each route module has a corresponding ``test_routes_*.py`` file. Routes are
exercised through FastAPI's TestClient with the database session, the admin
guard and other dependencies replaced via ``app.dependency_overrides``.
"""
