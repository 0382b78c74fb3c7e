import os
import structlog
import sys

from corsheaders.defaults import default_headers
from dotenv import load_dotenv


BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOG_DIR = os.path.join(BASE_DIR, 'var/log')

if not os.path.exists(LOG_DIR):
    os.makedirs(LOG_DIR)


def to_bool(value):
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


# Load Environment variables, defaulting to prod, where
# we don't inject DJANGO_ENV.
DJANGO_ENV = os.getenv("DJANGO_ENV", "prod")
ENVIRONMENTS = {
  "local": ".env.local",
  "docker": ".env.docker",
}

sys.stdout.write(f"Loading environment {DJANGO_ENV}\n")
dotenv_path = os.path.join(BASE_DIR, "config", ENVIRONMENTS.get(DJANGO_ENV) or ".env")

sys.stdout.write(f"Loading environment variables from {dotenv_path}\n")
load_dotenv(dotenv_path)

is_development = DJANGO_ENV in ENVIRONMENTS

# Secrets
SECRET_KEY = os.getenv("SECRET_KEY", "pgc-insecure-development-key")
DATAGOLF_API_KEY = os.getenv("DATAGOLF_API_KEY")

# Other common settings that vary by environment
allowed_hosts = os.getenv("ALLOWED_HOSTS")
if allowed_hosts is not None:
  ALLOWED_HOSTS = list(allowed_hosts.split(","))

trusted_origins = os.getenv("CSRF_TRUSTED_ORIGINS")
if trusted_origins is not None:
  CSRF_TRUSTED_ORIGINS = list(trusted_origins.split(","))

allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS")
if allowed_origins is not None:
  CORS_ALLOWED_ORIGINS = list(allowed_origins.split(","))

CORS_ALLOW_HEADERS = (
    *default_headers,
    "x-correlation-id",
)

DEBUG = to_bool(os.getenv("DEBUG", "False"))
SECURE_SSL_REDIRECT = to_bool(os.getenv("SECURE_SSL_REDIRECT", "False"))
SESSION_COOKIE_SECURE = to_bool(os.getenv("SESSION_COOKIE_SECURE", "False"))
CSRF_COOKIE_SECURE = to_bool(os.getenv("CSRF_COOKIE_SECURE", "False"))
CORS_ALLOW_CREDENTIALS = True

API_DOMAIN = os.getenv("API_DOMAIN", "api.pgctour.ca")
WEBSITE_URL = os.getenv("WEBSITE_URL")

# League settings
DEFAULT_MAX_PARTICIPANTS = int(os.getenv("DEFAULT_MAX_PARTICIPANTS", "75"))
MEMBER_ONLINE_MINUTES = int(os.getenv("MEMBER_ONLINE_MINUTES", "15"))
TOURNAMENT_DELETE_LIMIT = int(os.getenv("TOURNAMENT_DELETE_LIMIT", "500"))
DATAGOLF_BASE_URL = os.getenv("DATAGOLF_BASE_URL", "https://feeds.datagolf.com")

# Common settings
SITE_ID = 1

DEFAULT_AUTO_FIELD = 'django.db.models.AutoField'

ROOT_URLCONF = "pgc.urls"

WSGI_APPLICATION = "pgc.wsgi.application"

LANGUAGE_CODE = "en-us"

TIME_ZONE = "America/Toronto"

USE_I18N = False

USE_TZ = True

INSTALLED_APPS = (
    "corsheaders",
    "django_celery_beat",
    "django_celery_results",
    "django.contrib.contenttypes",
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.humanize",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.sites",
    "django.contrib.staticfiles",
    "django_structlog",
    "djoser",
    "rest_framework",
    "rest_framework.authtoken",
    "simple_history",
    "core",
    "courses",
    "golfers",
    "members",
    "seasons",
    "teams",
    "tiers",
    "tournaments",
    "tours",
    "transactions",
)

MIDDLEWARE = (
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
    "django_structlog.middlewares.RequestMiddleware",
    "core.middleware.auth_token",
)

AUTHENTICATION_BACKENDS = [
    "djoser.auth_backends.LoginFieldBackend",
    "django.contrib.auth.backends.ModelBackend",
]

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [os.path.join(BASE_DIR, "templates"), ],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

REST_FRAMEWORK = {
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticatedOrReadOnly",),
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework.authentication.TokenAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ),
    "EXCEPTION_HANDLER": "core.exception_handler.custom_exception_handler",
}

DJOSER = {
    "LOGIN_FIELD": "email",
    "SEND_ACTIVATION_EMAIL": False,
    "PASSWORD_RESET_CONFIRM_URL": "account/reset-password/{uid}/{token}",
    "PASSWORD_RESET_CONFIRM_RETYPE": True,
    "SERIALIZERS": {
        "current_user": "core.serializers.UserDetailSerializer",
    },
}
LOGIN_REDIRECT_URL = "/"

# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json_formatter": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.processors.JSONRenderer(),
        },
        "plain_console": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.dev.ConsoleRenderer(),
        },
        "key_value": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.processors.KeyValueRenderer(key_order=['timestamp', 'level', 'event', 'logger']),
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain_console",
        },
        "flat_line_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": LOG_DIR + "/pgc.log",
            "when": "W5",
            "backupCount": 12,
            "formatter": "key_value",
        },
        "celery_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": LOG_DIR + "/celery.log",
            "when": "W5",
            "backupCount": 12,
            "formatter": "key_value",
        },
    },
    "loggers": {
        "django_structlog": {
            "handlers": ["console", "flat_line_file"],
            "level": "ERROR",
        },
        "celery": {
            "handlers": ["console", "celery_file"],
            "level": "INFO",
        },
        "core": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "courses": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "golfers": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "members": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "teams": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "tiers": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "tournaments": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "tours": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
        "transactions": {
            "handlers": ["console", "flat_line_file"],
            "level": "INFO",
        },
    }
}

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

DJANGO_STRUCTLOG_CELERY_ENABLED = True

# Database
DATABASES = {
    'default': {
        'ENGINE': os.getenv("DATABASE_ENGINE", "django.db.backends.sqlite3"),
        'NAME': os.getenv("DATABASE_NAME", os.path.join(BASE_DIR, "var", "pgc.sqlite3")),
        'USER': os.getenv("DATABASE_USER"),
        'PASSWORD': os.getenv("DATABASE_PASSWORD"),
        'HOST': os.getenv("DATABASE_HOST"),
        'PORT': os.getenv("DATABASE_PORT"),
    }
}

# Caching
REDIS_URL = os.getenv("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
        },
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        },
    }

# Celery
CELERY_BROKER_URL = REDIS_URL or "memory://"
CELERY_RESULT_BACKEND = "django-db"
CELERY_TIMEZONE = TIME_ZONE
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TASK_TRACK_STARTED = True
CELERY_BEAT_SCHEDULER = "django_celery_beat.schedulers:DatabaseScheduler"

# Static files
STATIC_URL = "/static/"
STATIC_ROOT = os.path.join(BASE_DIR, "var", "static")

STATICFILES_FINDERS = (
    'django.contrib.staticfiles.finders.FileSystemFinder',
    'django.contrib.staticfiles.finders.AppDirectoriesFinder',
)

# Email settings
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@pgctour.ca")
