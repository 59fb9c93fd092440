from .base import *

DEBUG = True

ALLOWED_HOSTS = ["127.0.0.1", "localhost"]

# DRF renderers plus larges en dev (browsable API si tu veux)
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = (
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
)

# Corps des échanges avec le backend de vérification visibles en dev
LOG_LEVEL = "DEBUG"
LOGGING["loggers"]["livecheck"]["level"] = LOG_LEVEL
LOGGING["handlers"]["console"]["formatter"] = "simple"
LIVENESS_HTTP_VERBOSE = True
