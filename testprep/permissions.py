from rest_framework import permissions

from testprep.models import UserProfile

STAFF_ROLES = (UserProfile.Role.ADMIN, UserProfile.Role.TEACHER)


def user_role(user):
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser:
        return UserProfile.Role.ADMIN.value
    profile = getattr(user, 'profile', None)
    return str(profile.role) if profile else None


def user_roles(user):
    role = user_role(user)
    return [role] if role else []


def has_role(user, *roles):
    """Single role policy used by permission classes and services alike."""
    return user_role(user) in {str(role) for role in roles}


def is_staff_member(user):
    return has_role(user, *STAFF_ROLES)


class IsStaffMember(permissions.BasePermission):
    message = "Only teachers and admins can perform this action."

    def has_permission(self, request, view):
        return is_staff_member(request.user)


class IsAdminRole(permissions.BasePermission):
    message = "Only admins can perform this action."

    def has_permission(self, request, view):
        return has_role(request.user, UserProfile.Role.ADMIN)


class CatalogPermission(permissions.BasePermission):
    """Reads for everyone the view lets in, writes for staff, deletes for admins."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        if request.method == 'DELETE':
            self.message = "Only admins can delete catalog entries."
            return has_role(request.user, UserProfile.Role.ADMIN)
        self.message = "Only teachers and admins can change the catalog."
        return is_staff_member(request.user)
