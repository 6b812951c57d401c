"""
High-level use cases for the EcoRide API.

Each service module orchestrates the account repository, the approval gate
and the token service to implement business rules (login, registration,
moderation, etc.).

Routers (FastAPI endpoints) call these services instead of touching the
database or signing tokens directly.
"""
