"""
Django admin registrations for the front-desk models.

Patients are created by the registration endpoint and never edited
afterwards, so both models are exposed read-only.
"""

from django.contrib import admin

from .models import AuditEvent, Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'age', 'gender', 'blood_group', 'created_at')
    list_filter = ('gender', 'blood_group')
    search_fields = ('name',)
    readonly_fields = ('name', 'age', 'gender', 'blood_group', 'medical_document',
                       'fingerprint_data', 'fingerprint_digest', 'created_at')

    def has_add_permission(self, request) -> bool:
        return False


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'patient', 'created_at')
    list_filter = ('action',)
    readonly_fields = ('action', 'patient', 'detail', 'created_at')

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False
