from rest_framework import permissions

ADMIN = "admin"
MODERATOR = "moderator"
REGULAR = "regular"


def member_for_user(user):
    if user is None or not user.is_authenticated:
        return None
    return getattr(user, "member", None)


def user_role(user):
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return ADMIN
    member = member_for_user(user)
    if member is not None:
        return member.role
    return ADMIN if user.is_staff else REGULAR


def is_admin(user):
    return user_role(user) == ADMIN


def is_moderator(user):
    return user_role(user) in (ADMIN, MODERATOR)


class IsAdmin(permissions.BasePermission):
    message = "Forbidden: Admin access required"

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsModerator(permissions.BasePermission):
    message = "Forbidden: Moderator or admin access required"

    def has_permission(self, request, view):
        return is_moderator(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    message = "Forbidden: Admin access required"

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)
