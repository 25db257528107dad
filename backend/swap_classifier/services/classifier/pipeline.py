"""Transaction swap classifier."""
import logging
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Union, assert_never

from swap_classifier.config import ClassifierConfig
from swap_classifier.models.swap import ClassifierResult, RejectedResult, RejectionReason
from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.classifier.actions import find_swap_action
from swap_classifier.services.classifier.asset_delta_collector import collect_asset_deltas
from swap_classifier.services.classifier.core_tokens import CoreTokenClassifier
from swap_classifier.services.classifier.result_assembler import ResultAssembler
from swap_classifier.services.classifier.swap_shape_resolver import SplitShape, StandardShape, resolve_shape
from swap_classifier.services.classifier.swapper_identifier import identify_swapper
from swap_classifier.utils.constants import NON_SWAP_TRANSACTION_TYPES, SUCCESS_STATUS

logger = logging.getLogger(__name__)

TransactionInput = Union[RawTransaction, dict]


class SwapClassifier:
    """
    Classifies Solana transactions into BUY, SELL, split or rejected results.

    Stateless apart from its immutable configuration; safe to share across
    threads. Every failure inside classification is returned as a
    RejectedResult. Only a malformed input raises InvalidTransactionError.
    """

    def __init__(self, config: Optional[ClassifierConfig] = None):
        self.config = config or ClassifierConfig()
        self.core_tokens = CoreTokenClassifier(self.config)

    def classify(
        self,
        transaction: TransactionInput,
        sol_to_quote_rates: Optional[Mapping[str, Decimal]] = None,
    ) -> ClassifierResult:
        """
        Classify one transaction.

        Args:
            transaction: RawTransaction or a payload dict in the same shape
            sol_to_quote_rates: Optional mint -> quote units per SOL, used only
                to express SOL fees in a non-SOL quote asset

        Returns:
            ParsedResult, SplitResult or RejectedResult

        Raises:
            InvalidTransactionError: If a payload dict is malformed
        """
        tx = self._coerce(transaction)
        try:
            return self._classify(tx, sol_to_quote_rates)
        except Exception as e:
            logger.exception(f"[CLASSIFY] {tx.signature}: unexpected failure")
            return RejectedResult(
                signature=tx.signature,
                reason=RejectionReason.UNKNOWN_ERASE_REASON,
                debug_info={"error": f"{type(e).__name__}: {e}"},
            )

    def classify_many(
        self,
        transactions: Iterable[TransactionInput],
        sol_to_quote_rates: Optional[Mapping[str, Decimal]] = None,
    ) -> List[ClassifierResult]:
        """
        Classify a batch, at most once per signature.

        Args:
            transactions: RawTransactions or payload dicts
            sol_to_quote_rates: Passed through to classify

        Returns:
            One result per distinct signature, in first-seen order
        """
        seen = set()
        results: List[ClassifierResult] = []
        for transaction in transactions:
            tx = self._coerce(transaction)
            if tx.signature in seen:
                logger.debug(f"[CLASSIFY] {tx.signature}: duplicate in batch, skipped")
                continue
            seen.add(tx.signature)
            results.append(self.classify(tx, sol_to_quote_rates))
        return results

    @staticmethod
    def _coerce(transaction: TransactionInput) -> RawTransaction:
        if isinstance(transaction, RawTransaction):
            return transaction
        return RawTransaction.from_payload(transaction)

    def _reject(self, tx: RawTransaction, reason: RejectionReason, **debug) -> RejectedResult:
        logger.info(f"[CLASSIFY] {tx.signature}: rejected ({reason.value})")
        return RejectedResult(signature=tx.signature, reason=reason, debug_info=debug)

    def _classify(
        self,
        tx: RawTransaction,
        sol_to_quote_rates: Optional[Mapping[str, Decimal]],
    ) -> ClassifierResult:
        if tx.status.lower() != SUCCESS_STATUS.lower():
            return self._reject(tx, RejectionReason.TRANSACTION_FAILED, status=tx.status)

        if tx.type and tx.type.upper() in NON_SWAP_TRANSACTION_TYPES:
            return self._reject(tx, RejectionReason.NON_SWAP_TRANSACTION_TYPE, type=tx.type)

        swapper = identify_swapper(tx)
        if swapper is None:
            return self._reject(
                tx,
                RejectionReason.SWAPPER_IDENTIFICATION_FAILED,
                fee_payer=tx.fee_payer,
                signers=list(tx.signers),
            )

        collected = collect_asset_deltas(tx, swapper.address, self.config)
        if isinstance(collected, RejectedResult):
            return collected

        assembler = ResultAssembler(
            tx,
            swapper,
            collected,
            action=find_swap_action(tx, swapper.address),
            sol_to_quote_rates=sol_to_quote_rates,
        )

        match resolve_shape(tx.signature, collected.deltas, self.core_tokens):
            case StandardShape() as shape:
                return assembler.parsed(shape)
            case SplitShape() as shape:
                return assembler.split(shape)
            case RejectedResult() as rejection:
                return rejection
            case other:
                assert_never(other)
