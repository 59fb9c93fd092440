from dataclasses import dataclass
from typing import Optional

from .client import VerificationClient
from .config import CaptureConfig
from .errors import MissingArgumentsError
from .policy import LivenessOutcome, ProbabilityPolicy, extract_probability


@dataclass(frozen=True)
class RequestIdentity:
    auth_token: str
    template_id: str
    verification_id: str

    def validate(self) -> None:
        if not self.auth_token or not self.template_id or not self.verification_id:
            raise MissingArgumentsError("AuthToken, TemplateId, or VerificationId is missing.")


class LivenessService:
    """
    Orchestrateur: validation des entrées, appel du backend, lecture de l'enveloppe, décision.
    """
    def __init__(self, client: VerificationClient, policy: Optional[ProbabilityPolicy] = None) -> None:
        self.client = client
        self.policy = policy or ProbabilityPolicy()

    @classmethod
    def from_config(cls, config: CaptureConfig, transport=None) -> "LivenessService":
        client = VerificationClient(
            config.server_url,
            timeout=config.timeout,
            transport=transport,
            verbose=config.verbose_http,
        )
        return cls(client, ProbabilityPolicy(config.min_probability))

    def verify(self, *, bundle: bytes, image: Optional[bytes], identity: RequestIdentity) -> LivenessOutcome:
        identity.validate()
        if not bundle:
            raise MissingArgumentsError("Capture bundle is empty.")

        raw = self.client.submit(
            bundle,
            image or None,
            auth_token=identity.auth_token,
            template_id=identity.template_id,
            verification_id=identity.verification_id,
        )
        return self.policy.decide(extract_probability(raw))
