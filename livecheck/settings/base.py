"""
Base settings for LiveCheck — relais de vérification liveness
- Django 4.x / DRF 3.x
- Aucune persistance : chaque appel vit le temps d'un échange HTTP
- Client sortant httpx vers le backend de vérification biométrique
- drf-spectacular (Swagger & ReDoc)
- Logging structuré (JSON)
"""


from pathlib import Path
import os

BASE_DIR = Path(__file__).resolve().parent.parent

# ------------------------------------------------------------------------------
# ENV
# ------------------------------------------------------------------------------
def env(key: str, default=None, cast=None):
    val = os.getenv(key, default)
    if cast and val is not None:
        try:
            return cast(val)
        except Exception:
            return default
    return val

def optional_float(val: str):
    """'' -> None (pas de seuil), sinon float."""
    if val is None or str(val).strip() == "":
        return None
    return float(val)

SECRET_KEY = env("SECRET_KEY", "change-me")
DEBUG = False  # override in dev.py

ALLOWED_HOSTS = [h.strip() for h in env("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",") if h.strip()]

# ------------------------------------------------------------------------------
# APPS
# ------------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "rest_framework",
    "drf_spectacular",
    "drf_spectacular_sidecar",
]

LOCAL_APPS = [
    "kyc",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

# ------------------------------------------------------------------------------
# MIDDLEWARE
# ------------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "livecheck.urls"
WSGI_APPLICATION = "livecheck.wsgi.application"

# ------------------------------------------------------------------------------
# DATABASE
# ------------------------------------------------------------------------------
# Aucun modèle : backend "dummy" de Django.
DATABASES = {}

# ------------------------------------------------------------------------------
# I18N / TZ
# ------------------------------------------------------------------------------
LANGUAGE_CODE = "fr-fr"
TIME_ZONE = env("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# ------------------------------------------------------------------------------
# STATIC
# ------------------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ------------------------------------------------------------------------------
# REST FRAMEWORK (DRF)
# ------------------------------------------------------------------------------
REST_FRAMEWORK = {
    # L'en-tête Authorization appartient au backend de vérification : on ne l'interprète pas.
    "DEFAULT_AUTHENTICATION_CLASSES": (),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "DEFAULT_RENDERER_CLASSES": (
        "rest_framework.renderers.JSONRenderer",
    ),
    "DEFAULT_PARSER_CLASSES": (
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.MultiPartParser",
        "rest_framework.parsers.FormParser",
    ),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "rest_framework.views.exception_handler",
}

# Spectacular (OpenAPI)
SPECTACULAR_SETTINGS = {
    "TITLE": env("OPENAPI_TITLE", "LiveCheck API"),
    "DESCRIPTION": "Relais liveness : envoi du bundle de capture chiffré au backend de vérification biométrique.",
    "VERSION": env("OPENAPI_VERSION", "1.0.0"),
    "SERVE_INCLUDE_SCHEMA": False,
    "SCHEMA_PATH_PREFIX": r"/api/v1",
    "LICENSE": {"name": "Proprietary"},
    "COMPONENT_SPLIT_REQUEST": True,
    "SERVE_PERMISSIONS": ["rest_framework.permissions.AllowAny"],
    "SERVE_AUTHENTICATION": [],
    "SWAGGER_UI_DIST": "SIDECAR",
    "SWAGGER_UI_FAVICON_HREF": "SIDECAR",
    "REDOC_DIST": "SIDECAR",
}

# ------------------------------------------------------------------------------
# UPLOAD POLICIES
# ------------------------------------------------------------------------------
DATA_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024  # 20MB (bundle + jpeg)
FILE_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024

# ------------------------------------------------------------------------------
# LIVENESS (backend de vérification)
# ------------------------------------------------------------------------------
LIVENESS_SERVER_URL = env("LIVENESS_SERVER_URL", "https://integrate.idmetagroup.com/api/v1/verification")

# Seuil de décision sur la probabilité renvoyée. Vide => tout résultat parsé est un succès.
LIVENESS_MIN_PROBABILITY = env("LIVENESS_MIN_PROBABILITY", 0.5, cast=optional_float)

LIVENESS_PREVIEW_ENABLED = env("LIVENESS_PREVIEW_ENABLED", "1") == "1"
LIVENESS_PAYLOAD_SIZE = env("LIVENESS_PAYLOAD_SIZE", "normal")

# Clé de licence du SDK : jamais en dur dans le code.
LIVENESS_LICENSE_KEY = env("LIVENESS_LICENSE_KEY", "")

# Uploads volumineux sur réseaux mobiles lents : timeouts longs (secondes)
LIVENESS_TIMEOUTS = {
    "connect": env("LIVENESS_CONNECT_TIMEOUT_S", 180.0, cast=float),
    "read": env("LIVENESS_READ_TIMEOUT_S", 180.0, cast=float),
    "write": env("LIVENESS_WRITE_TIMEOUT_S", 180.0, cast=float),
    "pool": env("LIVENESS_POOL_TIMEOUT_S", 240.0, cast=float),
}

# Workers pour les sessions de capture (canal de résultat asynchrone)
LIVENESS_SESSION_WORKERS = env("LIVENESS_SESSION_WORKERS", 4, cast=int)

# ------------------------------------------------------------------------------
# SECURITY
# ------------------------------------------------------------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"
REFERRER_POLICY = "same-origin"

# ------------------------------------------------------------------------------
# LOGGING (JSON friendly)
# ------------------------------------------------------------------------------
LOG_LEVEL = env("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "logging.Formatter",
            "format": '{"ts":"%(asctime)s","lvl":"%(levelname)s","name":"%(name)s","msg":"%(message)s","module":"%(module)s","line":%(lineno)d}',
        },
        "simple": {"format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if env("LOG_JSON", "1") == "1" else "simple",
        },
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "livecheck": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# Corps requête/réponse du client sortant (debug uniquement)
LIVENESS_HTTP_VERBOSE = env("LIVENESS_HTTP_VERBOSE", "1" if LOG_LEVEL == "DEBUG" else "0") == "1"

# ------------------------------------------------------------------------------
# API VERSIONING
# ------------------------------------------------------------------------------
API_PREFIX = "api"
API_VERSION = "v1"

# ------------------------------------------------------------------------------
# HEALTHCHECK
# ------------------------------------------------------------------------------
def HEALTH_INFO():
    return {
        "name": "LiveCheck",
        "version": SPECTACULAR_SETTINGS["VERSION"],
        "env": "prod" if not DEBUG else "dev",
    }

# ------------------------------------------------------------------------------
# TEMPLATES
# ------------------------------------------------------------------------------
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]
