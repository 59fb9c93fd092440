"""
Lecture de l'enveloppe de réponse et politique de décision liveness.
Le backend renvoie result.response.capture_liveness.probability ; la décision
(live / rejeté) est une politique explicite, pas un effet de bord du parsing.
"""
import json
import math
from dataclasses import dataclass
from typing import Optional

from .errors import EnvelopeError

PROBABILITY_PATH = ("result", "response", "capture_liveness", "probability")

STATUS_SUCCESS = "Success"
STATUS_REJECTED = "Rejected"


def to_int_percent(value: float) -> int:
    """0.564 -> 56, 0.93 -> 93 (arrondi au demi supérieur)."""
    return int(math.floor(value * 100 + 0.5))


def extract_probability(raw: str) -> float:
    try:
        node = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise EnvelopeError(f"Invalid JSON response: {e}") from e

    for key in PROBABILITY_PATH:
        if not isinstance(node, dict) or key not in node:
            raise EnvelopeError(f"No value for {key}")
        node = node[key]

    if isinstance(node, bool) or not isinstance(node, (int, float)):
        raise EnvelopeError("probability is not a number")
    try:
        value = float(node)
    except OverflowError as e:
        raise EnvelopeError("probability is out of range") from e
    # json.loads accepte NaN / Infinity
    if not math.isfinite(value):
        raise EnvelopeError("probability is not finite")
    return value


@dataclass
class LivenessOutcome:
    status: str  # 'Success' | 'Rejected'
    probability: float
    is_live: bool
    threshold: Optional[float]

    @property
    def probability_percent(self) -> int:
        return to_int_percent(self.probability)


class ProbabilityPolicy:
    """
    min_probability=None : tout résultat parsé est un succès (comportement historique).
    Sinon : live si probability >= min_probability.
    """
    def __init__(self, min_probability: Optional[float] = None) -> None:
        if min_probability is not None and not 0.0 <= min_probability <= 1.0:
            raise ValueError("min_probability must be within [0, 1]")
        self.min_probability = min_probability

    def decide(self, probability: float) -> LivenessOutcome:
        is_live = self.min_probability is None or probability >= self.min_probability
        return LivenessOutcome(
            status=STATUS_SUCCESS if is_live else STATUS_REJECTED,
            probability=probability,
            is_live=is_live,
            threshold=self.min_probability,
        )
