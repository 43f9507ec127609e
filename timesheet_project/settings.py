"""
Django settings for timesheet_project.

Everything deployment specific comes from environment variables (a local
.env file is loaded with python-dotenv).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-local-development-key')

DEBUG = os.getenv('DJANGO_DEBUG', 'False') in ('1', 'T', 'TRUE', 'True', 'true')

ALLOWED_HOSTS = [h for h in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'timesheet',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'timesheet_project.urls'

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
    },
]

WSGI_APPLICATION = 'timesheet_project.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Slack
SLACK_BOT_TOKEN = os.getenv('SLACK_BOT_TOKEN')

# Dumps request contexts and intermediate reports at DEBUG level
DEBUG_MODE = os.getenv('DEBUG_MODE', 'False') in ('1', 'T', 'TRUE', 'True', 'true')

# Active view refresher
VIEW_REFRESH_MAX_WORKERS = int(os.getenv('VIEW_REFRESH_MAX_WORKERS', '8'))
VIEW_REFRESH_DEADLINE_SECONDS = int(os.getenv('VIEW_REFRESH_DEADLINE_SECONDS', '50'))
VIEW_REFRESH_STALE_MINUTES = int(os.getenv('VIEW_REFRESH_STALE_MINUTES', '5'))

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {'class': 'logging.StreamHandler'},
    },
    'loggers': {
        'timesheet': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG_MODE else 'INFO',
        },
    },
}
