from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from apps.rewards.services import TierEngine
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """User admin showing the cached reward balance and derived tier"""
    list_display = [
        'username', 'email', 'role', 'reward_points', 'reward_tier',
        'is_staff', 'created_at'
    ]
    list_filter = ['role', 'is_staff', 'is_superuser', 'is_active', 'created_at']
    search_fields = ['username', 'email']
    ordering = ['-created_at']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Marketplace', {
            'fields': ('role', 'avatar')
        }),
        ('Rewards', {
            'fields': ('reward_points', 'reward_tier'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
    # The balance is only ever changed through the rewards ledger
    readonly_fields = ['reward_points', 'reward_tier', 'created_at', 'updated_at']

    @admin.display(description='Tier')
    def reward_tier(self, obj):
        return TierEngine.tier_for(obj.reward_points).display_name

    actions = ['activate_users', 'deactivate_users']

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} users activated.')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} users deactivated.')
