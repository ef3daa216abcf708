"""
URL mappings for the directory API.

Trailing slashes are omitted on every route.  Ids are matched as plain
path segments so a malformed id gets the JSON 404 from the view rather
than Django's HTML one.
"""
from django.urls import path

from .views import auth, departments, health, hospitals

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    # Identity
    path('api/auth/register', auth.register_view, name='auth-register'),
    path('api/auth/login', auth.login_view, name='auth-login'),
    path('api/auth/me', auth.me_view, name='auth-me'),
    # Hospitals
    path('api/hospitals', hospitals.hospitals, name='hospital-list'),
    path('api/hospitals/<str:pk>', hospitals.hospital_detail, name='hospital-detail'),
    path('api/hospitals/<str:pk>/departments', hospitals.hospital_departments, name='hospital-departments'),
    # Departments
    path('api/departments', departments.departments, name='department-list'),
    path('api/departments/<str:pk>', departments.department_detail, name='department-detail'),
    path('api/departments/<str:pk>/doctors', departments.department_doctors, name='department-doctors'),
]
