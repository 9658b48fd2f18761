from django.urls import path
from . import views

urlpatterns = [
    path('<int:pk>/eligibility/', views.donor_eligibility_view, name='donor-eligibility'),
    path('user/<int:user_id>/', views.donor_by_user_view, name='donor-by-user'),
]
