from django.urls import path
from . import views

urlpatterns = [
    path('appointments/', views.appointment_list_view, name='appointment-list'),
    path('appointments/book/', views.book_appointment_view, name='appointment-book'),
    path('appointments/donor/<int:donor_id>/', views.donor_appointments_view, name='appointment-donor'),
    path('appointments/<int:pk>/status/', views.appointment_status_view, name='appointment-status'),
    path('appointments/<int:pk>/cancel/', views.appointment_cancel_view, name='appointment-cancel'),
    path('camps/', views.camp_list_view, name='camp-list'),
]
