"""
Taxonomie des erreurs de vérification.

Toutes les erreurs remontent de façon synchrone à l'appelant : aucune n'est
rejouée ni avalée par le client.
"""
from typing import Optional


class VerificationError(Exception):
    code = "VERIFICATION_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(VerificationError):
    """Connexion refusée, timeout, IO."""
    code = "TRANSPORT_ERROR"


class ServerError(VerificationError):
    """Réponse non-2xx du backend. `message` = message extrait (ou corps brut)."""
    code = "SERVER_ERROR"

    def __init__(self, status_code: int, message: str, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return f"Request failed: {self.message} (Code: {self.status_code})"


class EmptyBodyError(VerificationError):
    """2xx sans corps : anomalie transport/proxy, pas une erreur applicative."""
    code = "EMPTY_BODY"


class EnvelopeError(VerificationError):
    """2xx mais result.response.capture_liveness.probability introuvable."""
    code = "ENVELOPE_ERROR"


class CaptureError(VerificationError):
    code = "CAPTURE_ERROR"


class LicenseError(VerificationError):
    code = "LICENSE_ERROR"


class MissingArgumentsError(ValueError):
    """Pré-condition violée côté appelant (jeton, identifiants ou bundle manquant)."""
