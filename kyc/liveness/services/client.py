import base64
import json
import logging
from typing import Optional

import httpx

from .errors import EmptyBodyError, ServerError, TransportError

logger = logging.getLogger("livecheck.liveness.client")

ENDPOINT = "/biometricsverification"
BUNDLE_FILENAME = "capture.bin"
BUNDLE_CONTENT_TYPE = "application/octet-stream"
JPEG_DATA_URI_PREFIX = "data:image/jpeg;base64,"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

# connect/read/write 3 min, pool 4 min : gros bundles sur réseau mobile lent
DEFAULT_TIMEOUT = httpx.Timeout(connect=180.0, read=180.0, write=180.0, pool=240.0)


def jpeg_data_uri(jpeg: bytes) -> str:
    return JPEG_DATA_URI_PREFIX + base64.b64encode(jpeg).decode("ascii")


def extract_error_message(body: str) -> str:
    """
    Message d'un corps d'erreur : champ `message` d'un objet JSON, sinon corps brut.
    Ne lève jamais.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if not isinstance(data, dict):
        return body
    message = data.get("message")
    if message is None:
        return UNKNOWN_ERROR_MESSAGE
    return str(message)


class VerificationClient:
    """
    Client du backend de vérification biométrique.

    Un appel = un échange HTTP : pas de retry, pas de cache, pas de batch.
    Aucune validation des entrées (c'est le rôle de l'appelant).
    """

    def __init__(self, server_url: str, *, timeout: Optional[httpx.Timeout] = None,
                 transport: Optional[httpx.BaseTransport] = None, verbose: bool = False) -> None:
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.transport = transport
        self.verbose = verbose

    @property
    def endpoint_url(self) -> str:
        return f"{self.server_url}{ENDPOINT}"

    def build_form(self, *, template_id: str, verification_id: str, image: Optional[bytes]) -> dict:
        data = {
            "template_id": template_id,
            "verification_id": verification_id,
        }
        if image is not None:
            data["image_base64"] = jpeg_data_uri(image)
        return data

    def submit(self, bundle: bytes, image: Optional[bytes], *, auth_token: str,
               template_id: str, verification_id: str) -> str:
        """
        Envoie le bundle (+ JPEG optionnel) et retourne le corps brut de la réponse 2xx.
        Lève TransportError / ServerError / EmptyBodyError.
        """
        headers = {
            "Authorization": auth_token,
            "Accept": "application/json",
        }
        data = self.build_form(template_id=template_id, verification_id=verification_id, image=image)
        files = {"image": (BUNDLE_FILENAME, bundle, BUNDLE_CONTENT_TYPE)}

        if self.verbose:
            logger.debug("POST %s fields=%s bundle_bytes=%d", self.endpoint_url,
                         {k: (v if k != "image_base64" else f"<{len(v)} chars>") for k, v in data.items()},
                         len(bundle))

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(self.endpoint_url, headers=headers, data=data, files=files)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Verification request failed: %s", e)
            raise TransportError(f"Verification request failed: {e}") from e

        body = resp.text
        if self.verbose:
            logger.debug("HTTP %s %s", resp.status_code, body[:2000])

        if not resp.is_success:
            self._raise_response_error(resp.status_code, body)

        if not body:
            raise EmptyBodyError("Request was successful but the response body was empty.")
        return body

    def _raise_response_error(self, status_code: int, body: str) -> None:
        if not body:
            raise ServerError(status_code, f"Request failed with code {status_code} and an empty error body.")
        message = extract_error_message(body)
        logger.info("Verification rejected by backend: HTTP %s", status_code)
        raise ServerError(status_code, message, body=body)
