"""
Admin panel configuration for security logging models.
"""
from django.contrib import admin
from django.utils.html import format_html
from common.models import SuspiciousActivityLog


@admin.register(SuspiciousActivityLog)
class SuspiciousActivityLogAdmin(admin.ModelAdmin):
    """Admin for suspicious activity logs"""

    list_display = ['severity_display', 'activity_type', 'order_id', 'ip_address', 'resolved', 'timestamp']
    list_filter = ['activity_type', 'severity', 'resolved', 'timestamp']
    search_fields = ['order_id', 'ip_address']
    readonly_fields = ['activity_type', 'severity', 'order_id', 'details',
                       'ip_address', 'user_agent', 'timestamp']
    date_hierarchy = 'timestamp'
    actions = ['mark_resolved']

    def severity_display(self, obj):
        colors = {
            'LOW': '#28A745',
            'MEDIUM': '#FFC107',
            'HIGH': '#FD7E14',
            'CRITICAL': '#DC3545',
        }
        color = colors.get(obj.severity, '#6C757D')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_severity_display()
        )
    severity_display.short_description = 'Severity'
    severity_display.admin_order_field = 'severity'

    @admin.action(description='Mark selected entries as resolved')
    def mark_resolved(self, request, queryset):
        updated = queryset.update(resolved=True)
        self.message_user(request, f"{updated} entries marked as resolved.")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return request.user.is_superuser
