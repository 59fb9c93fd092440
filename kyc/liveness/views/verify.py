from concurrent.futures import CancelledError

from django.conf import settings
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse

from ..serializers.input import LivenessVerifyInputSerializer
from ..serializers.output import LivenessVerifyOutputSerializer
from ..services.config import CaptureConfig
from ..services.errors import LicenseError, MissingArgumentsError, ServerError, VerificationError
from ..services.liveness_service import RequestIdentity
from ..services.session import CaptureSession, get_executor


def _error(code: str, message: str, http_status: int, details: dict | None = None) -> Response:
    err = {"code": code, "message": message}
    if details:
        err["details"] = details
    return Response({"error": err}, status=http_status)

def _read(upload) -> bytes:
    if upload is None:
        return b""
    return upload.read()

@extend_schema(
    tags=["Liveness"],
    request=LivenessVerifyInputSerializer,
    responses={
        200: OpenApiResponse(response=LivenessVerifyOutputSerializer,
             description="Décision liveness du backend de vérification"),
        400: OpenApiResponse(description="MISSING_ARGUMENTS"),
        409: OpenApiResponse(description="CANCELED"),
        502: OpenApiResponse(description="LIVENESS_FAILED (transport, backend, enveloppe)"),
        503: OpenApiResponse(description="LICENSE_ERROR"),
    },
    examples=[
        OpenApiExample(
            "Exemple réponse",
            value={
                "iad_result": "Success",
                "is_live": True,
                "probability": 0.93,
                "probability_percent": 93,
                "threshold": 0.5,
            },
            response_only=True,
        ),
    ],
)
class LivenessVerifyView(APIView):
    """
    POST /liveness/verify
    Multipart: bundle (fichier), image (JPEG optionnel), auth_token, template_id, verification_id
    auth_token absent => en-tête Authorization de la requête, relayé tel quel.
    """
    serializer_class = LivenessVerifyInputSerializer
    parser_classes = (MultiPartParser, FormParser)

    def post(self, request):
        # 1) Validate input
        ser = self.serializer_class(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        identity = RequestIdentity(
            auth_token=data.get("auth_token") or request.headers.get("Authorization", ""),
            template_id=data.get("template_id", ""),
            verification_id=data.get("verification_id", ""),
        )
        bundle = _read(data.get("bundle"))
        image = _read(data.get("image")) or None
        try:
            identity.validate()
            if not bundle:
                raise MissingArgumentsError("Capture bundle is missing.")
        except MissingArgumentsError as e:
            return _error("MISSING_ARGUMENTS", str(e), status.HTTP_400_BAD_REQUEST)

        # 2) Session de capture : le SDK a déjà produit photo + bundle côté mobile
        config = CaptureConfig.from_settings(settings)
        session = CaptureSession(identity, config, executor=get_executor(settings.LIVENESS_SESSION_WORKERS))
        session.start()
        if image is not None:
            session.on_photo(image)
        session.on_bundle(bundle)

        # 3) Résultat
        try:
            outcome = session.result.result()
        except CancelledError:
            return _error("CANCELED", "Liveness check was canceled.", status.HTTP_409_CONFLICT)
        except LicenseError as e:
            return _error(e.code, e.message, status.HTTP_503_SERVICE_UNAVAILABLE)
        except VerificationError as e:
            details = {"kind": e.code}
            if isinstance(e, ServerError):
                details["upstream_status"] = e.status_code
            return _error("LIVENESS_FAILED", str(e), status.HTTP_502_BAD_GATEWAY, details)

        return Response({
            "iad_result": outcome.status,
            "is_live": outcome.is_live,
            "probability": outcome.probability,
            "probability_percent": outcome.probability_percent,
            "threshold": outcome.threshold,
        }, status=200)
