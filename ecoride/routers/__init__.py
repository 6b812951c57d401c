"""
FastAPI routers grouped by domain (auth, admin).

Each module exposes an APIRouter that create_app() includes. Endpoints stay
thin and delegate to the services package.
"""
