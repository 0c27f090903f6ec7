"""
Admin configuration for notifications app.

Ledger entries are append-only; deleting one lets the same notification
go out again on that day.
"""

from django.contrib import admin
from .models import EscalationLedgerEntry, ReminderLedgerEntry


@admin.register(ReminderLedgerEntry)
class ReminderLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ('task', 'volunteer', 'sent_on', 'message_id', 'created_at')
    list_filter = ('sent_on',)
    search_fields = ('task__title', 'volunteer__full_name', 'message_id')
    date_hierarchy = 'sent_on'
    raw_id_fields = ('task', 'volunteer')
    readonly_fields = ('task', 'volunteer', 'sent_on', 'message_id', 'created_at')

    def has_add_permission(self, request):
        return False


@admin.register(EscalationLedgerEntry)
class EscalationLedgerEntryAdmin(admin.ModelAdmin):
    list_display = ('task', 'admin_email', 'sent_on', 'message_id', 'created_at')
    list_filter = ('sent_on',)
    search_fields = ('task__title', 'admin_email', 'message_id')
    date_hierarchy = 'sent_on'
    raw_id_fields = ('task',)
    readonly_fields = ('task', 'admin_email', 'sent_on', 'message_id', 'created_at')

    def has_add_permission(self, request):
        return False
