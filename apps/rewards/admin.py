from django.contrib import admin, messages

from .exceptions import RewardsError
from .models import RewardTransaction
from .services import LedgerService


@admin.register(RewardTransaction)
class RewardTransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'kind', 'direction', 'points', 'status', 'description', 'expiry_date', 'created_at']
    list_filter = ['kind', 'direction', 'status', 'created_at']
    search_fields = ['user__username', 'user__email', 'description']
    readonly_fields = [
        'user', 'points', 'kind', 'direction', 'description', 'counterparty',
        'related_booking', 'related_reservation', 'reversal_of', 'status',
        'expiry_date', 'created_at'
    ]
    actions = ['reverse_transactions']

    def has_add_permission(self, request):
        return False  # Entries are written through LedgerService

    def has_delete_permission(self, request, obj=None):
        return False  # Ledger is append-only

    @admin.action(description='Reverse selected credits')
    def reverse_transactions(self, request, queryset):
        reversed_count = 0
        for entry in queryset:
            try:
                LedgerService.reverse(entry.pk, description=f"Reversed by {request.user.username}")
                reversed_count += 1
            except RewardsError as e:
                self.message_user(request, f"#{entry.pk}: {e.message}", messages.WARNING)
        if reversed_count:
            self.message_user(request, f"{reversed_count} transactions reversed.")
