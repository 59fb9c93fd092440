from django.urls import path

from kyc.liveness.views.verify import LivenessVerifyView

urlpatterns = [
    path("verify", LivenessVerifyView.as_view(), name="liveness-verify"),
]
