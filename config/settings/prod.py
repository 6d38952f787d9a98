"""Production settings.

This module extends the base settings with production specific
configuration. Sensitive values (secret key, Stripe keys, database and
SMTP credentials) must be provided via environment variables.
"""

from django.core.exceptions import ImproperlyConfigured  # type: ignore

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')

if SECRET_KEY == 'replace-me-in-production':
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set in production')

# Configure secure proxies and cookies
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Email backend (e.g. SMTP) should be configured via environment variables
EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = os.environ.get('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.environ.get('EMAIL_PORT', 25))
EMAIL_USE_TLS = os.environ.get('EMAIL_USE_TLS', 'false').lower() == 'true'
EMAIL_HOST_USER = os.environ.get('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.environ.get('EMAIL_HOST_PASSWORD', '')
