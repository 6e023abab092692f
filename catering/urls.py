"""
URL configuration for the catering project.

The booking engine has no public routes of its own; only the operator
console (Django admin) and a health check are mounted here.
"""
from django.contrib import admin
from django.urls import path
from django.http import HttpResponse


urlpatterns = [
    # Simple health check endpoint for load balancers and CI smoke tests
    path('healthz/', lambda request: HttpResponse('ok'), name='healthz'),
    path('admin/', admin.site.urls),
]
