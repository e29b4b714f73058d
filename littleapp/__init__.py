"""
Little Application: Package Initializer
==========================================

What: Marks the `littleapp` directory as a Python package.
Who:  Imported by uvicorn (via littleapp.main), Alembic, and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Lookups, ownership checks
    ├─────────────────────────────────────┤
    │     Query (Filter / Sort / Page)    │  ← Advanced results pipeline
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
