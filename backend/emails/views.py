import logging

from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser, IsAuthenticated

from .renderer import render_email_preview

logger = logging.getLogger('backend.emails')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def email_preview(request):
    """Render an email template with dummy data; accepts unsaved template overrides"""
    data = request.data if isinstance(request.data, dict) else {}
    overrides = data.get('overrides')
    if not isinstance(overrides, dict):
        overrides = {}
    subject, html = render_email_preview(data.get('type'), overrides)
    logger.debug(f"Rendered email preview: {subject}")
    return HttpResponse(html, content_type='text/html; charset=utf-8')
