"""
Apna SAHE Backend — Application Package Initializer
=====================================================

What: Marks the `apna_sahe` directory as a Python package.
Why:  Enables module imports like `from apna_sahe.config import settings`.
Who:  Used by uvicorn (`apna_sahe.main:app`) and pytest.

Architecture Note:
    The backend is a thin layer over managed platform services:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Security (token verification,     │  ← Bearer tokens, owner-or-admin
    │   authorization dependencies)       │
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Points transactions, validation
    ├─────────────────────────────────────┤
    │      Schemas (API contracts)        │  ← Pydantic, camelCase on the wire
    ├─────────────────────────────────────┤
    │  Firebase / Cloudinary (Platform)   │  ← Firestore, Auth, Storage, media
    └─────────────────────────────────────┘

    Durable state, authentication and file hosting all live in the platform.
    This package never stores anything locally.
"""

__version__ = "1.0.0"
