from rest_framework.permissions import BasePermission


class IsCustomer(BasePermission):
    """Only accounts with the customer role hold a rewards balance"""
    message = 'Only customers can access rewards'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'is_customer', False))
