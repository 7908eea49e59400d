import logging

from django.http import HttpResponse
from django.views.decorators.http import require_GET
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from backend.core.cache_utils import get_public_settings
from .injector import render_stylesheet
from .presets import FONT_OPTIONS, PRESETS, RADIUS_OPTIONS
from .tokens import split_public_settings

logger = logging.getLogger('backend.theme')


def get_current_theme():
    """Stored theme tokens laid over the defaults"""
    theme, _ = split_public_settings(get_public_settings())
    return theme


@api_view(['GET'])
@permission_classes([AllowAny])
def theme_detail(request):
    """Merged theme token mapping for the storefront"""
    return Response(get_current_theme())


@api_view(['GET'])
@permission_classes([AllowAny])
def preset_list(request):
    return Response({
        'presets': [preset.to_dict() for preset in PRESETS],
        'radius_options': RADIUS_OPTIONS,
        'font_options': FONT_OPTIONS,
    })


@require_GET
def theme_stylesheet(request):
    """The current theme as a :root stylesheet"""
    css = render_stylesheet(get_current_theme())
    return HttpResponse(css, content_type='text/css; charset=utf-8')
