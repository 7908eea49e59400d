from rest_framework import serializers
from .models import User, Setting, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = Setting
        fields = ['id', 'key', 'value', 'group', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SettingUpsertSerializer(serializers.Serializer):
    """A single {key, value} pair; the key is looked up, not the primary key"""
    key = serializers.CharField(max_length=100)
    value = serializers.CharField(allow_blank=True, trim_whitespace=False, default='')
    group = serializers.ChoiceField(choices=Setting.GROUP_CHOICES, required=False)

    def validate_key(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Key cannot be empty.")
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
