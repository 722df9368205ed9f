from rest_framework.permissions import BasePermission


class IsPropertyAdmin(BasePermission):
    """Hosts and staff manage booking status; guests do not"""
    message = 'Only property admins can confirm bookings'

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return bool(
            user.is_staff
            or getattr(user, 'role', None) in (user.ROLE_PROPERTY_ADMIN, user.ROLE_SUPER_ADMIN)
        )
