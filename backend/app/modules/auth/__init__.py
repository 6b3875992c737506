# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    require_roles,
    get_current_super_admin,
    get_current_school_admin,
    get_current_staff,
    get_current_parent,
    get_school_context,
    get_admin_school_context,
    get_staff_school_context,
    get_portal_student,
)

__all__ = [
    "get_current_user",
    "require_roles",
    "get_current_super_admin",
    "get_current_school_admin",
    "get_current_staff",
    "get_current_parent",
    "get_school_context",
    "get_admin_school_context",
    "get_staff_school_context",
    "get_portal_student",
]
