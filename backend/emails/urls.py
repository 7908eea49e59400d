from django.urls import path
from . import views

urlpatterns = [
    path('settings/email-preview/', views.email_preview, name='email-preview'),
]
