# Routes package init
"""
Apna SAHE Backend — API Routes Package
========================================

What:  HTTP handlers for the portal's backend-for-frontend.

Route Inventory:
    - health.py:     GET  /health
    - auth.py:       /api/auth/...       (sign-up, sign-in, own profile, admins)
    - users.py:      /api/users/...      (directory, leaderboard, points)
    - notes.py:      /api/notes/...      (upload, browse, search, stats, delete)
    - media.py:      POST /api/cloudinary/delete-note-file
    - events.py:     /api/events/...
    - facilities.py: /api/facilities/...
    - queries.py:    /api/queries/...

Design Principle:
    Routes stay thin: pull inputs from the request, resolve the caller with
    the security dependencies, call one service method, shape the response.
"""
