from django.contrib import admin
from .models import ActivityLog, EmergencyRequest, InventoryBag

@admin.register(InventoryBag)
class InventoryBagAdmin(admin.ModelAdmin):
    list_display = ['id', 'blood_type', 'quantity', 'expiry_date', 'status', 'test_status', 'safety_flag']
    list_filter = ['blood_type', 'status', 'test_status', 'safety_flag']
    search_fields = ['donor_name', 'blood_type']
    raw_id_fields = ['source_appointment', 'donor_user']

@admin.register(EmergencyRequest)
class EmergencyRequestAdmin(admin.ModelAdmin):
    list_display = ['blood_type', 'units_requested', 'units_fulfilled', 'hospital', 'urgency', 'status', 'created_at']
    list_filter = ['status', 'urgency', 'blood_type']
    search_fields = ['hospital']
    # Changed only by the allocator
    readonly_fields = ['units_fulfilled', 'status']

@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'activity_type', 'description']
    list_filter = ['activity_type']
