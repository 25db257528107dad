"""Core (settlement) token classification."""
from typing import List, Tuple

from swap_classifier.config import ClassifierConfig
from swap_classifier.models.swap import AssetDelta


class CoreTokenClassifier:
    """Tags assets as core or non-core against the configured mint set."""

    def __init__(self, config: ClassifierConfig):
        self.core_mints = config.core_token_mints

    def is_core(self, mint: str) -> bool:
        return mint in self.core_mints

    def tag(self, deltas: List[AssetDelta]) -> List[Tuple[AssetDelta, bool]]:
        """Pair each delta with whether its mint is core."""
        return [(delta, self.is_core(delta.mint)) for delta in deltas]
