# Services package init
"""
Apna SAHE Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and Firestore / Cloudinary.
How:   Each service is a stateless singleton; the Firestore client is passed
       into every call so tests can hand in an in-memory fake.

Service Inventory:
    - AuthService:           registration, sign-in/out, own profile, points award
    - UserService:           user directory and leaderboard
    - NoteService:           note upload / listing / search / stats / deletion
    - EventService:          campus events
    - InfrastructureService: facilities directory
    - QueryService:          student note requests
    - FileService:           PDF validation and storage naming
    - MediaService:          Cloudinary raw uploads and destroys
"""
