"""
Django settings for config project.

Base settings for both development and production.
Env-vars decide behavior (DEBUG, DB, SECRET_KEY, etc).
"""
from datetime import timedelta
from pathlib import Path
import os
from dotenv import load_dotenv

# -------------------------------------------------------------------
# PATHS
# -------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent


# -------------------------------------------------------------------
# CORE ENV FLAGS
# -------------------------------------------------------------------
# ENV can be: "dev", "prod", "staging" etc (optional, for your own use)
env_path = BASE_DIR / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=True)
ENV = os.environ.get("ENV", "dev")

# SECURITY WARNING: keep the secret key used in production secret!
# In dev, this will fallback to this default. In prod, set SECRET_KEY env.
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")

# Debug from env: DEBUG=0 or DEBUG=1
DEBUG = os.environ.get("DEBUG", "1") == "1"

# Allowed hosts from env; default for local/dev
ALLOWED_HOSTS = os.environ.get(
    "DJANGO_ALLOWED_HOSTS",
    "127.0.0.1,localhost,testserver"
).split(",")


# -------------------------------------------------------------------
# APPLICATIONS
# -------------------------------------------------------------------
INSTALLED_APPS = [
    # Django core
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_extensions",
    # Third-party
    "rest_framework",
    "rest_framework_simplejwt",
    "corsheaders",

    # TeamUp apps
    "users",
    "authx",
    "core",
    "teams",
    "notifications",
    "ux",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
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

# Frontend origins allowed to call the API (comma separated env)
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]


# -------------------------------------------------------------------
# DATABASE
# -------------------------------------------------------------------
# Use DATABASE_URL env var if available (Supabase/Heroku/Render standard)
import dj_database_url

if os.environ.get("DATABASE_URL"):
    DATABASES = {
        "default": dj_database_url.config(
            default=os.environ.get("DATABASE_URL"),
            conn_max_age=600,
            conn_health_checks=True,
            ssl_require=True,
        )
    }
# Fallback to manual DB_NAME config which matches current local logic
elif os.environ.get("DB_NAME"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("DB_NAME"),
            "USER": os.environ.get("DB_USER"),
            "PASSWORD": os.environ.get("DB_PASSWORD"),
            "HOST": os.environ.get("DB_HOST", "127.0.0.1"),
            "PORT": os.environ.get("DB_PORT", "5432"),
            "OPTIONS": {
                "sslmode": "require",
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }


# -------------------------------------------------------------------
# TEAM FORMATION
# -------------------------------------------------------------------
TEAM_DEFAULT_MAX_MEMBERS = int(os.environ.get("TEAM_DEFAULT_MAX_MEMBERS", "5"))
FEED_PAGE_SIZE = int(os.environ.get("FEED_PAGE_SIZE", "50"))
NOTIFICATION_PAGE_SIZE = int(os.environ.get("NOTIFICATION_PAGE_SIZE", "50"))

# Used for the default avatar of freshly registered profiles
AVATAR_URL_TEMPLATE = os.environ.get(
    "AVATAR_URL_TEMPLATE",
    "https://api.dicebear.com/7.x/initials/svg?seed={seed}",
)

# Hosted identity provider; unset disables SupabaseJWTAuthentication
SUPABASE_JWT_SECRET = os.environ.get("SUPABASE_JWT_SECRET")


# -------------------------------------------------------------------
# PASSWORD VALIDATION
# -------------------------------------------------------------------
# Registration only enforces the minimum length; weak passwords map to
# the "auth/weak-password" error code.
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 6},
    },
]


# -------------------------------------------------------------------
# INTERNATIONALIZATION
# -------------------------------------------------------------------
LANGUAGE_CODE = "en-us"

TIME_ZONE = os.environ.get("TIME_ZONE", "UTC")

USE_I18N = True
USE_TZ = True


# -------------------------------------------------------------------
# STATIC
# -------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"  # for collectstatic in prod


# -------------------------------------------------------------------
# DJANGO DEFAULTS
# -------------------------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = "users.User"


# -------------------------------------------------------------------
# REST FRAMEWORK
# -------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        # Supabase JWT first (hosted identity provider)
        "core.supabase_auth.SupabaseJWTAuthentication",
        # SimpleJWT (tokens issued by /api/auth/login/)
        "rest_framework_simplejwt.authentication.JWTAuthentication",
        # Session & basic still allowed (admin, browsable API)
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.ScopedRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "auth-login": os.environ.get("AUTH_LOGIN_RATE", "10/minute"),
        "auth-register": os.environ.get("AUTH_REGISTER_RATE", "5/minute"),
        "invitations": "30/minute",
    },
    "EXCEPTION_HANDLER": "core.exceptions.custom_exception_handler",
}


SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=60),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=7),
    "ROTATE_REFRESH_TOKENS": False,
    "BLACKLIST_AFTER_ROTATION": False,
    "AUTH_HEADER_TYPES": ("Bearer",),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[{levelname}] {asctime} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        # Django internals
        "django": {
            "handlers": ["console"],
            "level": "INFO",
        },
        # Our project-level logs
        "teamup": {
            "handlers": ["console"],
            "level": os.environ.get("TEAMUP_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        # DRF / API errors
        "django.request": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": False,
        },
    },
}

# -------------------------------------------------------------------
# SECURITY (mainly active when DEBUG=False)
# -------------------------------------------------------------------
if not DEBUG:
    # Basic security hardening for production
    SECURE_SSL_REDIRECT = True

    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True

    SECURE_HSTS_SECONDS = 31536000  # 1 year
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True

    SECURE_CONTENT_TYPE_NOSNIFF = True

    # Optional: CSRF trusted origins (comma separated env)
    csrf_trusted = os.environ.get("CSRF_TRUSTED_ORIGINS", "")
    if csrf_trusted:
        CSRF_TRUSTED_ORIGINS = [origin.strip() for origin in csrf_trusted.split(",")]
