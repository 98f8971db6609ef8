import os
from pathlib import Path
from decouple import Csv, config


# BASE DIRECTORY
# BASE_DIR points to the project root (where manage.py lives)
BASE_DIR = Path(__file__).resolve().parent.parent


# SECURITY SETTINGS

# SECURITY WARNING: keep the secret key used in production secret!
# Generate a new one with django.core.management.utils.get_random_secret_key()
SECRET_KEY = config('SECRET_KEY', default='django-insecure-leadcrm-CHANGE-THIS-IN-PRODUCTION')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=True, cast=bool)

# Format: 'crm.example.com,www.crm.example.com'
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1,0.0.0.0,testserver', cast=Csv())


# INSTALLED APPS

INSTALLED_APPS = [
    # Django built-in apps
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party apps
    'rest_framework',  # API settings (session auth, JSON rendering)
    'corsheaders',  # CORS headers for the dashboard frontend
    'crispy_forms',  # Landing page form rendering
    'crispy_bootstrap5',  # Bootstrap 5 template pack

    # Our apps
    # IMPORTANT: accounts must be first (custom user model)
    'apps.accounts',  # Users, roles, teams, permissions
    'apps.core',  # Branches, settings store, landing pages
    'apps.customers',  # Customer (lead) management
    'apps.dashboard',  # Widget engine + aggregation endpoints
]


# MIDDLEWARE

# Order matters: requests pass top to bottom, responses bottom to top
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',  # must be before CommonMiddleware
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]


# URL CONFIGURATION
ROOT_URLCONF = 'config.urls'


# TEMPLATES
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [
            BASE_DIR / 'templates',
        ],
        # Look for templates inside each app's templates/ directory
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]


# WSGI APPLICATION
# Used by Gunicorn, uWSGI, etc.
WSGI_APPLICATION = 'config.wsgi.application'


# DATABASE

# sqlite for local development and tests, PostgreSQL in production:
# DB_ENGINE=django.db.backends.postgresql DB_NAME=leadcrm DB_HOST=db ...
DB_ENGINE = config('DB_ENGINE', default='django.db.backends.sqlite3')

if DB_ENGINE == 'django.db.backends.sqlite3':
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': config('DB_NAME', default=str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': config('DB_NAME', default='leadcrm_db'),
            'USER': config('DB_USER', default='leadcrm_user'),
            'PASSWORD': config('DB_PASSWORD', default='leadcrm_pass'),
            'HOST': config('DB_HOST', default='db'),  # 'db' is the Docker service name
            'PORT': config('DB_PORT', default='5432'),
            'CONN_MAX_AGE': 600,  # Keep connections open for 10 minutes
            'OPTIONS': {
                'connect_timeout': 10,
            }
        }
    }


# AUTHENTICATION

# Custom user model. IMPORTANT: must be set before the first migration!
AUTH_USER_MODEL = 'accounts.User'

# Login credentials are 4-digit PINs. They are stretched into a synthetic
# email/password pair before they reach Django's auth backend:
#   email    = username@AUTH_EMAIL_DOMAIN
#   password = pin + AUTH_PASSWORD_SUFFIX
AUTH_EMAIL_DOMAIN = config('AUTH_EMAIL_DOMAIN', default='crm.internal')
AUTH_PASSWORD_SUFFIX = config('AUTH_PASSWORD_SUFFIX', default='_CRM_SECURE_2024')

LOGIN_URL = '/admin/login/'
LOGIN_REDIRECT_URL = '/admin/'


# INTERNATIONALIZATION

LANGUAGE_CODE = 'ko-kr'

TIME_ZONE = 'Asia/Seoul'

USE_I18N = True

# All datetimes in the database are stored in UTC
USE_TZ = True


# STATIC FILES (CSS, JavaScript, Images)
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# MEDIA FILES (User Uploads)

# Branding uploads land in MEDIA_ROOT/branding/
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'


# CRISPY FORMS (Landing page form styling)
CRISPY_ALLOWED_TEMPLATE_PACKS = 'bootstrap5'
CRISPY_TEMPLATE_PACK = 'bootstrap5'


# DJANGO REST FRAMEWORK (API)
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DATETIME_FORMAT': 'iso-8601',
}


# CORS HEADERS (Cross-Origin Resource Sharing)

# In development: allow all
# In production: list the dashboard frontend domains
if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True
else:
    CORS_ALLOWED_ORIGINS = config('CORS_ALLOWED_ORIGINS', default='', cast=Csv())
CORS_ALLOW_CREDENTIALS = True


# CELERY (Background Tasks)

CELERY_BROKER_URL = config('REDIS_URL', default='redis://redis:6379/0')
CELERY_RESULT_BACKEND = config('REDIS_URL', default='redis://redis:6379/0')

CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'

CELERY_TIMEZONE = TIME_ZONE

# Hard limit 5 minutes, soft limit 4 minutes (1 minute left for cleanup)
CELERY_TASK_TIME_LIMIT = 5 * 60
CELERY_TASK_SOFT_TIME_LIMIT = 4 * 60


# LOGGING

LOG_DIR = BASE_DIR / 'logs'
os.makedirs(LOG_DIR, exist_ok=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,

    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },

    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
        'file': {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': LOG_DIR / 'crm.log',
            'maxBytes': 1024 * 1024 * 10,  # 10 MB
            'backupCount': 5,
            'formatter': 'verbose',
        },
    },

    'loggers': {
        'django': {
            'handlers': ['console', 'file'],
            'level': config('LOG_LEVEL', default='INFO'),
            'propagate': True,
        },
        'apps': {
            'handlers': ['console', 'file'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}


# CUSTOM SETTINGS

# Customer list
CUSTOMER_PAGE_SIZE = config('CUSTOMER_PAGE_SIZE', default=50, cast=int)

# Session settings
SESSION_COOKIE_AGE = 86400  # 24 hours in seconds
SESSION_SAVE_EVERY_REQUEST = False

# File upload settings
FILE_UPLOAD_MAX_MEMORY_SIZE = 5 * 1024 * 1024  # 5 MB
DATA_UPLOAD_MAX_MEMORY_SIZE = 10 * 1024 * 1024  # 10 MB

# Branding uploads (logo, favicon)
BRANDING_MAX_UPLOAD_SIZE = config('BRANDING_MAX_UPLOAD_SIZE', default=2 * 1024 * 1024, cast=int)
BRANDING_ALLOWED_CONTENT_TYPES = [
    'image/png',
    'image/svg+xml',
    'image/x-icon',
    'image/jpeg',
]

# Synthetic data generator (development only)
SEED_SAMPLE_DATA_ENABLED = config('SEED_SAMPLE_DATA_ENABLED', default=DEBUG, cast=bool)

# Dashboard composition store
DASHBOARD_LAYOUT_KEY = 'dashboard_layout'
DASHBOARD_PRESETS_KEY = 'dashboard_presets'
DASHBOARD_GRID_COLUMNS = 12

# Callback reminders are issued this many minutes ahead
CALLBACK_REMINDER_WINDOW_MINUTES = 15


# SECURITY SETTINGS (Production)

if not DEBUG:
    SECURE_SSL_REDIRECT = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = 'DENY'

    # HSTS (HTTP Strict Transport Security)
    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True


# DEFAULT AUTO FIELD
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
