from django.contrib import admin
from .models import Donor

@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display = ['get_name', 'blood_type', 'safety_status', 'last_donated_at']
    list_filter = ['blood_type', 'safety_status']
    search_fields = ['user__first_name', 'user__last_name', 'user__username']
