"""
Apna SAHE Backend — Pydantic Schemas
======================================

What:  API contracts for every resource the backend exposes.
How:   Fields are snake_case in Python and camelCase on the wire and in
       Firestore (`CamelModel`), so a document dict validates directly into a
       response model and an update payload dumps directly into a Firestore
       update.
"""
