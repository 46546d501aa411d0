"""
Django admin registrations for the equipment models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    Alert,
    AuditEvent,
    Fault,
    Intervention,
    Invoice,
    Machine,
    MaintenanceControl,
    MaintenanceSchedule,
    User,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'first_name', 'email', 'role', 'is_active')
    list_filter = ('role', 'is_active')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('DiaCare', {'fields': ('role', 'patient_id', 'technician_id', 'admin_id')}),
    )


@admin.register(Machine)
class MachineAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'inventory_number', 'department', 'status', 'next_maintenance')
    search_fields = ('name', 'inventory_number')
    list_filter = ('status', 'department')


@admin.register(Fault)
class FaultAdmin(admin.ModelAdmin):
    list_display = ('id', 'date', 'fault_type', 'machine', 'status')
    list_filter = ('status',)


@admin.register(Intervention)
class InterventionAdmin(admin.ModelAdmin):
    list_display = ('id', 'requested_intervention', 'inventory_number', 'status', 'notifications', 'date_performed')
    list_filter = ('status', 'notifications')
    search_fields = ('requested_intervention', 'inventory_number')


@admin.register(MaintenanceControl)
class MaintenanceControlAdmin(admin.ModelAdmin):
    list_display = ('id', 'machine', 'control_type', 'control_date', 'next_control_date', 'status')
    list_filter = ('control_type', 'status')


@admin.register(MaintenanceSchedule)
class MaintenanceScheduleAdmin(admin.ModelAdmin):
    list_display = ('id', 'machine', 'type', 'due_date', 'status')
    list_filter = ('status', 'type')


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ('id', 'priority', 'type', 'machine', 'status', 'timestamp')
    list_filter = ('priority', 'status')
    search_fields = ('message',)
    readonly_fields = ('dedup_key',)


admin.site.register(Invoice)
admin.site.register(AuditEvent)
