"""
HTTP client for the settings API.

SettingsGateway is what the theme editor talks to: it reads the stored
settings, writes dirty keys back in one bulk call and uploads images. Every
failure surfaces as GatewayError; nothing is retried.
"""
import logging

from django.conf import settings
import requests

from .exceptions import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def resolve_upload_url(path, upload_base_url):
    """Absolute URL for a stored upload path; absolute URLs are returned as-is"""
    if not path:
        return ''
    if path.startswith('http'):
        return path
    base = (upload_base_url or '').rstrip('/')
    return f"{base}/{path.lstrip('/')}"


class SettingsGateway:

    def __init__(self, base_url, upload_base_url='', token=None, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip('/')
        self.upload_base_url = upload_base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.set_token(token)

    @classmethod
    def from_settings(cls, token=None, **kwargs):
        """Gateway for this deployment (API_BASE_URL, UPLOAD_BASE_URL)"""
        return cls(settings.API_BASE_URL, settings.UPLOAD_BASE_URL, token=token, **kwargs)

    def set_token(self, token):
        self.session.headers.update({'Authorization': f'Bearer {token}'})

    def _request(self, method, endpoint, **kwargs):
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise GatewayError(str(e)) from e

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning(f"{method} {url} returned {response.status_code}: {message}")
            raise GatewayError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _error_message(response):
        try:
            data = response.json()
        except ValueError:
            return response.text or response.reason or 'Request failed'
        if isinstance(data, dict):
            for field in ('error', 'message', 'detail'):
                if data.get(field):
                    return str(data[field])
        return str(data)

    def fetch_settings(self):
        """All settings records (admin)"""
        return self._request('GET', '/settings/').json()

    def fetch_public_settings(self):
        """Safe keys plus every theme_* record (anonymous)"""
        return self._request('GET', '/settings/public/').json()

    def bulk_update(self, items):
        """Upsert a list of {key, value} records in one request"""
        return self._request('POST', '/settings/bulk/', json=list(items)).json()

    def upload_image(self, file, filename=None):
        """Upload an image; returns the stored path (e.g. /uploads/123_logo.webp)"""
        name = filename or getattr(file, 'name', 'upload')
        response = self._request('POST', '/upload/', files={'file': (name, file)})
        return response.json().get('url', '')

    def render_email_preview(self, email_type, overrides=None):
        """Rendered preview HTML for one email type"""
        response = self._request(
            'POST',
            '/settings/email-preview/',
            json={'type': email_type, 'overrides': overrides or {}},
        )
        return response.text

    def resolve_upload_url(self, path):
        return resolve_upload_url(path, self.upload_base_url)
