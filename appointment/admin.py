from django.contrib import admin
from .models import Appointment, Camp

@admin.register(Camp)
class CampAdmin(admin.ModelAdmin):
    list_display = ['name', 'date', 'start_time', 'end_time', 'district', 'nearest_hospital']
    list_filter = ['date', 'province', 'district']
    search_fields = ['name', 'location', 'district']

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['donor_name', 'center_type', 'center_name', 'date', 'time', 'status']
    list_filter = ['center_type', 'status', 'date']
    search_fields = ['donor_name', 'center_name', 'donor__user__username']
    raw_id_fields = ['donor', 'donor_user']
