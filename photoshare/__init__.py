"""
Photoshare Backend - Application Package
=========================================

What: Photo sharing API (accounts, photo uploads, likes, comments).
Who:  Imported by uvicorn (`photoshare.main:app`), Alembic, and pytest.

Layers:

    ┌─────────────────────────────────────┐
    │     Routes + Dependencies (HTTP)    │  ← status codes, auth guard
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← credentials, tokens, photos
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
