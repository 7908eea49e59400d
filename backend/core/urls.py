from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me,
    setting_list_create, setting_bulk_update, setting_public_list, setting_detail,
    upload_file,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/bulk/', setting_bulk_update, name='setting-bulk-update'),
    path('settings/public/', setting_public_list, name='setting-public-list'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),

    # Upload endpoint
    path('upload/', upload_file, name='upload-file'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
