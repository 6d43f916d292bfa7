"""
Aquarium Log Backend: Application Package
===========================================

What: REST API for logging aquarium visits: aquarium catalog, visits with
      photos, wishlist, user profiles and rankings.
Who:  Imported by uvicorn (aquarium_log.main:app), Alembic and pytest.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (queries, rules, storage) │  ← Query composer, rankings, CRUD
    ├─────────────────────────────────────┤
    │    Serializers (read-model shapes)  │  ← Batch decoration of rows
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
