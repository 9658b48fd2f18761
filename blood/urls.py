from django.urls import path
from . import views

urlpatterns = [
    # Inventory
    path('inventory/', views.inventory_list_view, name='inventory-list'),
    path('inventory/lab/pending/', views.inventory_pending_lab_view, name='inventory-lab-pending'),
    path('inventory/summary/', views.inventory_summary_view, name='inventory-summary'),
    path('inventory/add/', views.inventory_add_view, name='inventory-add'),
    path('inventory/<int:pk>/test/', views.inventory_lab_result_view, name='inventory-lab-result'),

    # Emergency requests
    path('emergency/request/', views.emergency_request_create_view, name='emergency-request-create'),
    path('emergency/requests/', views.emergency_requests_active_view, name='emergency-requests-active'),
    path('emergency/requests/all/', views.emergency_requests_all_view, name='emergency-requests-all'),
    path('emergency/requests/<int:pk>/fulfill/', views.emergency_request_fulfill_view, name='emergency-request-fulfill'),

    # Activity feed
    path('activity/recent/', views.activity_recent_view, name='activity-recent'),
]
