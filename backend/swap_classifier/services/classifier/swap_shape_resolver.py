"""Resolution of a two-asset delta set into a swap shape."""
import logging
from typing import List, Literal, Union

from pydantic import BaseModel, ConfigDict

from swap_classifier.models.swap import AssetDelta, Direction, RejectedResult, RejectionReason
from swap_classifier.services.classifier.asset_delta_collector import describe_deltas
from swap_classifier.services.classifier.core_tokens import CoreTokenClassifier

logger = logging.getLogger(__name__)


class StandardShape(BaseModel):
    """One core and one non-core asset."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["standard"] = "standard"
    direction: Direction
    base: AssetDelta
    quote: AssetDelta


class SplitShape(BaseModel):
    """Two non-core assets; each becomes the other's proxy quote."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["split"] = "split"
    outgoing: AssetDelta
    incoming: AssetDelta


SwapShape = Union[StandardShape, SplitShape]


def resolve_shape(
    signature: str,
    deltas: List[AssetDelta],
    classifier: CoreTokenClassifier,
) -> Union[StandardShape, SplitShape, RejectedResult]:
    """
    Decide the swap shape of exactly two asset deltas.

    A negative core delta is a BUY of the non-core asset, a positive core
    delta a SELL. Two non-core assets form a split swap.

    Args:
        signature: Transaction signature, for rejections and logs
        deltas: The two net swapper deltas
        classifier: Core token classifier

    Returns:
        StandardShape, SplitShape, or a RejectedResult
    """

    def reject(reason: RejectionReason) -> RejectedResult:
        logger.info(f"[SHAPE] {signature}: {reason.value}")
        return RejectedResult(
            signature=signature,
            reason=reason,
            debug_info={
                "deltas": describe_deltas(deltas),
                "core": [classifier.is_core(delta.mint) for delta in deltas],
            },
        )

    if len(deltas) != 2:
        return reject(RejectionReason.INVALID_ASSET_COUNT)

    first, second = deltas
    if first.raw_delta == 0 or second.raw_delta == 0:
        return reject(RejectionReason.QUOTE_BASE_DETECTION_FAILED)
    if (first.raw_delta > 0) == (second.raw_delta > 0):
        return reject(RejectionReason.NO_OPPOSITE_DELTAS)

    (a, a_core), (b, b_core) = classifier.tag(deltas)
    if a_core and b_core:
        return reject(RejectionReason.AMBIGUOUS_CORE_TO_CORE)

    if a_core or b_core:
        quote, base = (a, b) if a_core else (b, a)
        direction = Direction.BUY if quote.raw_delta < 0 else Direction.SELL
        logger.debug(f"[SHAPE] {signature}: {direction.value} {base.mint} for {quote.mint}")
        return StandardShape(direction=direction, base=base, quote=quote)

    outgoing, incoming = (a, b) if a.raw_delta < 0 else (b, a)
    logger.debug(f"[SHAPE] {signature}: split {outgoing.mint} -> {incoming.mint}")
    return SplitShape(outgoing=outgoing, incoming=incoming)
