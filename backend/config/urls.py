"""
URL configuration for the Warung Forza back-office.

Every app mounts its routes under api/v1/.
"""
from django.conf import settings
from django.contrib import admin
from django.urls import path, include, re_path
from django.views.static import serve

admin.site.site_header = "Warung Forza Admin Panel"
admin.site.site_title = "Warung Forza Admin Portal"
admin.site.index_title = "Welcome to Warung Forza Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.emails.urls')),
    path('api/v1/', include('backend.theme.urls')),
    path('api/v1/', include('backend.payments.urls')),
    re_path(r'^uploads/(?P<path>.*)$', serve, {'document_root': settings.UPLOAD_ROOT}),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
