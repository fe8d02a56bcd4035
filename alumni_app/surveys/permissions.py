from __future__ import annotations

from django.core.exceptions import PermissionDenied


def can_build_surveys(user) -> bool:
    # Survey authoring is restricted to association admins (staff users)
    if not user.is_authenticated:
        return False
    return bool(user.is_active and user.is_staff)


def require_can_build(user) -> None:
    if not can_build_surveys(user):
        raise PermissionDenied("You do not have permission to build surveys.")
