from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
import logging

from .cache_utils import get_public_settings
from .filters import AuditLogFilter
from .models import Setting, AuditLog
from .serializers import (
    UserSerializer, SettingSerializer, SettingUpsertSerializer, AuditLogSerializer
)
from .uploads import store_image, InvalidUpload
from .utils import (
    create_audit_log, upsert_setting, bulk_upsert_settings, get_env_setting_fallbacks
)

User = get_user_model()
logger = logging.getLogger('backend.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            from rest_framework_simplejwt.exceptions import AuthenticationFailed
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with groups and back-office access flags"""
    user = request.user
    user_data = UserSerializer(user).data
    user_data['groups'] = list(user.groups.values_list('name', flat=True))

    is_admin = user.is_superuser or user.is_staff or 'Admin' in user_data['groups']
    user_data['is_admin'] = is_admin
    user_data['can_edit_theme'] = is_admin
    user_data['can_access_audit_logs'] = is_admin
    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_list_create(request):
    """
    GET: list all settings, plus environment fallbacks for keys missing in the database.
    POST: save or update one setting by key.
    """
    if request.method == 'GET':
        settings = list(Setting.objects.all())
        data = SettingSerializer(settings, many=True).data
        existing_keys = {s.key for s in settings}
        for key, value in get_env_setting_fallbacks().items():
            if key not in existing_keys:
                data.append({'key': key, 'value': value})
        return Response(data)

    serializer = SettingUpsertSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    setting, created = upsert_setting(
        serializer.validated_data['key'],
        serializer.validated_data['value'],
        serializer.validated_data.get('group')
    )
    create_audit_log(
        request=request,
        action='settings_update',
        model_name='Setting',
        object_id=setting.id,
        object_name=setting.key,
        changes={'value': setting.value, 'created': created}
    )
    return Response({'message': 'Setting saved', 'setting': SettingSerializer(setting).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_bulk_update(request):
    """Save or update multiple settings in one request (all or nothing)"""
    if not isinstance(request.data, list):
        return Response({'error': 'Expected a list of {key, value} objects'}, status=status.HTTP_400_BAD_REQUEST)

    serializer = SettingUpsertSerializer(data=request.data, many=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        result = bulk_upsert_settings(serializer.validated_data)
    except Exception as e:
        logger.error(f"Bulk settings update failed: {e}")
        return Response({'error': 'Failed to save settings'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    keys = [item['key'] for item in serializer.validated_data]
    create_audit_log(
        request=request,
        action='settings_bulk_update',
        model_name='Setting',
        object_id='bulk',
        object_name=', '.join(keys)[:255],
        changes={item['key']: item['value'] for item in serializer.validated_data}
    )
    logger.info(f"Bulk settings update: {len(result['created'])} created, {len(result['updated'])} updated")
    return Response({'message': 'Settings saved', 'count': len(keys)})


@api_view(['GET'])
@permission_classes([AllowAny])
def setting_public_list(request):
    """List only settings that are safe for the storefront (store identity and theme tokens)"""
    return Response(get_public_settings())


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
@parser_classes([MultiPartParser, FormParser])
def upload_file(request):
    """Upload an image (multipart field 'file') and return its public path"""
    uploaded = request.FILES.get('file')
    if not uploaded:
        return Response({'error': 'No file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        url = store_image(uploaded)
    except InvalidUpload as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except OSError as e:
        logger.error(f"Failed to save upload {uploaded.name}: {e}")
        return Response({'error': 'Failed to save file'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='upload',
        model_name='Upload',
        object_id=url,
        object_name=uploaded.name[:255]
    )
    return Response({'message': 'File uploaded successfully', 'url': url})


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering (action, model, date_from, date_to, reference)"""
    queryset = AuditLog.objects.select_related('user')

    if not request.user.is_staff:
        queryset = queryset.filter(user=request.user)

    filterset = AuditLogFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    queryset = filterset.qs.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_staff and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
