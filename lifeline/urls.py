"""lifeline URL Configuration

JSON endpoints live under /api/; the Django admin is where camps and other
reference data are maintained.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs using include
    path('api/', include('appointment.urls')),
    path('api/', include('blood.urls')),
    path('api/donors/', include('donor.urls')),
]
