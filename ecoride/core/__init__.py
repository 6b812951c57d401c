"""
Core utilities shared across the EcoRide API.

This package hosts configuration, logging setup, the error taxonomy and
password hashing. Services depend on these primitives instead of importing
FastAPI or reading the environment themselves.
"""
