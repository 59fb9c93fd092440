from .base import *

DEBUG = False
ALLOWED_HOSTS = ["testserver", "127.0.0.1", "localhost"]

# Pas de manifest statique en test
STORAGES["staticfiles"] = {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"}

LIVENESS_SERVER_URL = "https://verify.test/api/v1/verification"
LIVENESS_MIN_PROBABILITY = 0.5
LIVENESS_LICENSE_KEY = "QUFBQUFBQUFsaWNlbnNlLWtleS1mb3ItdGVzdHM="
LIVENESS_HTTP_VERBOSE = False

LOGGING["loggers"]["livecheck"]["level"] = "WARNING"
LOGGING["loggers"]["django"]["level"] = "WARNING"
