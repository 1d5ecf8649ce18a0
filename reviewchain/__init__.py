"""
Verified Reviews Application Package

Review submission service for a wallet-identified storefront. A review is
accepted once per (wallet, product) pair, fingerprinted with a verification
hash, persisted, and replicated to content-addressable storage when a
publication backend is reachable.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine and session factory for the SQL store
- exceptions.py: Error taxonomy shared by services and routers
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- stores/: Review Store interface and its adapters
- routers/: API route handlers
- services/: Business logic (hashing, publication, events, submission)
"""

__version__ = "0.1.0"
