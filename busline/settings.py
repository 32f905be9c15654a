from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent

env = environ.Env(
    DJANGO_SECRET_KEY=(str, "dev-secret"),
    DEBUG=(bool, False),
    TIME_ZONE=(str, "Asia/Seoul"),
    ALLOWED_HOSTS=(list, ["*"]),
    DATABASE_URL=(str, f"sqlite:///{BASE_DIR.parent / 'db.sqlite3'}"),
    REDIS_URL=(str, "redis://localhost:6379/0"),
    SESSION_LOCK_REDIS_URL=(str, ""),
    SESSION_LOCK_TIMEOUT_SECONDS=(float, 10.0),
    ROUTE_AUTHORING_URL=(str, ""),
    HTTP_TIMEOUT_SECONDS=(float, 10.0),
    DEFAULT_APPROACH_RADIUS_KM=(float, 0.5),
    DEFAULT_ARRIVAL_RADIUS_KM=(float, 0.1),
    DEPARTURE_HYSTERESIS_FACTOR=(float, 1.2),
    PASS_THROUGH_MIN_ALIGNMENT=(float, 0.5),
)

environ.Env.read_env(str(BASE_DIR.parent / ".env"))

SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = env("DEBUG")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS") if isinstance(env("ALLOWED_HOSTS"), str) else env("ALLOWED_HOSTS")
REDIS_URL = env("REDIS_URL")

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "corsheaders",
    "rest_framework",
    "drf_spectacular",
    "routing",
    "tracking",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "busline.urls"

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

WSGI_APPLICATION = "busline.wsgi.application"

DATABASES = {
    "default": env.db("DATABASE_URL")
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "ko-kr"
TIME_ZONE = env("TIME_ZONE")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Busline Checkpoint Tracking API",
    "DESCRIPTION": "Live drive sessions that infer stop approach, arrival and departure from GPS fixes",
    "VERSION": "1.0.0",
}

CORS_ALLOW_ALL_ORIGINS = True

# Celery
CELERY_BROKER_URL = env("REDIS_URL")
CELERY_RESULT_BACKEND = env("REDIS_URL")
CELERY_TASK_TIME_LIMIT = 60
CELERY_TASK_SOFT_TIME_LIMIT = 45

# Per-session write serialization; empty URL leaves it to the database row lock.
SESSION_LOCK_REDIS_URL = env("SESSION_LOCK_REDIS_URL")
SESSION_LOCK_TIMEOUT_SECONDS = env.float("SESSION_LOCK_TIMEOUT_SECONDS", default=10.0)

# Remote route-authoring service; empty means routes are read from the local store.
ROUTE_AUTHORING_URL = env("ROUTE_AUTHORING_URL")
HTTP_TIMEOUT_SECONDS = env.float("HTTP_TIMEOUT_SECONDS", default=10.0)

# Checkpoint detection
DEFAULT_APPROACH_RADIUS_KM = env.float("DEFAULT_APPROACH_RADIUS_KM", default=0.5)
DEFAULT_ARRIVAL_RADIUS_KM = env.float("DEFAULT_ARRIVAL_RADIUS_KM", default=0.1)
DEPARTURE_HYSTERESIS_FACTOR = env.float("DEPARTURE_HYSTERESIS_FACTOR", default=1.2)
PASS_THROUGH_MIN_ALIGNMENT = env.float("PASS_THROUGH_MIN_ALIGNMENT", default=0.5)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO"},
        "routing": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "tracking": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "busline": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
