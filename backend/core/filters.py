import django_filters
from .models import AuditLog


class AuditLogFilter(django_filters.FilterSet):
    """
    Filters for the audit log list:
    - action: exact action code
    - model: exact model name
    - date_from / date_to: created_at range (inclusive)
    - reference: object_reference contains
    """
    action = django_filters.CharFilter(field_name='action')
    model = django_filters.CharFilter(field_name='model_name')
    date_from = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    date_to = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')
    reference = django_filters.CharFilter(field_name='object_reference', lookup_expr='icontains')

    class Meta:
        model = AuditLog
        fields = ['action', 'model', 'date_from', 'date_to', 'reference']
