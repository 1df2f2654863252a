import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# NOTE: In production, SECRET_KEY must come from environment for security.
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-polyflex-key')

# DEBUG defaults to True for dev; set DEBUG=0/false in production.
DEBUG = str(os.environ.get('DEBUG', '1')).lower() in {'1', 'true', 'yes'}

# Allow all in dev; in production set ALLOWED_HOSTS from env.
_env_allowed = os.environ.get('ALLOWED_HOSTS')
ALLOWED_HOSTS: list[str] = (
    [h for h in (_env_allowed.split() if _env_allowed else ['*']) if h]
)
# Trust HTTPS scheme from reverse proxies (X-Forwarded-Proto: https)
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
CSRF_TRUSTED_ORIGINS: list[str] = []

# If DOMAIN is provided (e.g., factory.example.com), trust it for HTTPS.
_domain = os.environ.get('DOMAIN')
if _domain:
    _domain = _domain.replace('http://', '').replace('https://', '').strip('/')
    CSRF_TRUSTED_ORIGINS += [
        f"https://{_domain}",
        f"https://www.{_domain}",
    ]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'users',
    'job_orders',
    'production_line.apps.ProductionLineConfig',
    'reports',
    'csp',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'csp.middleware.CSPMiddleware',
]

# Content Security Policy settings for django-csp >= 4.0
CONTENT_SECURITY_POLICY = {
    "DIRECTIVES": {
        "default-src": ["'self'"],
        "script-src": ["'self'"],
        "style-src": ["'self'", "'unsafe-inline'"],
        # QR labels are served as SVG from our own origin
        "img-src": ["'self'", "data:"],
        "connect-src": ["'self'"],
    }
}

ROOT_URLCONF = 'Polyflex.urls'
WSGI_APPLICATION = 'Polyflex.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    }
]

AUTH_USER_MODEL = 'users.CustomUser'

# Default DB is SQLite. Can be overridden with env vars for Postgres/MySQL.
_db_engine = os.environ.get('DB_ENGINE', 'django.db.backends.sqlite3')
if _db_engine == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('DJANGO_DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': _db_engine,
            'NAME': os.environ.get('DB_NAME', 'polyflex'),
            'USER': os.environ.get('DB_USER', 'polyflex'),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', '127.0.0.1'),
            'PORT': os.environ.get('DB_PORT', '5432'),
        }
    }

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

SESSION_EXPIRE_AT_BROWSER_CLOSE = False
SESSION_COOKIE_AGE = 60 * 60 * 24 * 14  # 14 days

LOGIN_URL = '/admin/login/'
LOGIN_REDIRECT_URL = '/job-orders/'

# Production dashboards poll /reports/api/metrics/ at this interval.
PRODUCTION_POLL_INTERVAL_SECONDS = int(os.environ.get('PRODUCTION_POLL_INTERVAL_SECONDS', '5'))

_log_level = os.environ.get('POLYFLEX_LOG_LEVEL', 'INFO').upper()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'production_line': {'handlers': ['console'], 'level': _log_level, 'propagate': False},
        'job_orders': {'handlers': ['console'], 'level': _log_level, 'propagate': False},
        'reports': {'handlers': ['console'], 'level': _log_level, 'propagate': False},
    },
}

# In DEBUG, send report-only header so development isn't blocked by CSP.
if DEBUG:
    CONTENT_SECURITY_POLICY_REPORT_ONLY = CONTENT_SECURITY_POLICY
    CONTENT_SECURITY_POLICY = None

# --- Static files: enable WhiteNoise in production for robust static serving ---
if not DEBUG:
    # Insert WhiteNoise right after SecurityMiddleware
    idx = MIDDLEWARE.index('django.middleware.security.SecurityMiddleware')
    MIDDLEWARE.insert(idx + 1, 'whitenoise.middleware.WhiteNoiseMiddleware')
    STORAGES = {
        'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
        'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedStaticFilesStorage'},
    }
