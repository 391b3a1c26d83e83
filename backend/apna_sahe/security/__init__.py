"""
Apna SAHE Backend — Security Package
======================================

What:  Bearer token verification and the owner-or-admin authorization rules.
Why:   Every write endpoint and the file deletion endpoint share one set of
       checks instead of each route re-implementing them.
"""

from apna_sahe.security.auth import (
    AuthenticatedUser,
    ensure_can_modify,
    get_current_user,
    is_admin_user,
    require_admin,
)

__all__ = [
    "AuthenticatedUser",
    "ensure_can_modify",
    "get_current_user",
    "is_admin_user",
    "require_admin",
]
