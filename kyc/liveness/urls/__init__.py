from .liveness_urls import urlpatterns
