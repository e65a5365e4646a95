"""
Restaurant CRM Backend - Application Package Initializer
========================================================

What:  Marks the `restaurant_crm` directory as a Python package.
Who:   Used by uvicorn (`uvicorn restaurant_crm.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │   Middleware (request id, access)   │  ← runs before any route
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← CRUD rules, raises domain errors
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Failures raised anywhere below the routes propagate unchanged to the
    error hook in `restaurant_crm.errors`, which is the only place that
    turns an exception into an HTTP response body.
"""

__version__ = "1.0.0"
