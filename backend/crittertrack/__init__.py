"""
CritterTrack Backend — Application Package Initializer
======================================================

What: Marks the `crittertrack` directory as a Python package.
Who:  Imported by uvicorn (`crittertrack.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered; each layer only talks to the one below it.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Auth Gate / Services (Business)   │  ← identity, ownership scoping
    ├─────────────────────────────────────┤
    │   Credential Store (sql|rest|memory)│  ← typed outcomes, no HTTP
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Ownership scoping lives in the services and is enforced by the store
    query itself: every animal or litter operation is filtered by the
    authenticated user's id.
"""

__version__ = "1.0.0"
