"""Transaction classification endpoints."""
from functools import lru_cache
from typing import List, Optional, assert_never

from fastapi import APIRouter, HTTPException

from swap_classifier.api.routes import records
from swap_classifier.config import settings
from swap_classifier.models.classify import (
    BatchClassifyRequest,
    BatchClassifyResponse,
    ClassifyRequest,
    PayloadFormat,
)
from swap_classifier.models.record import ClassificationSource
from swap_classifier.models.swap import ClassifierResult, ParsedResult, RejectedResult, SplitResult
from swap_classifier.models.transaction import RawTransaction
from swap_classifier.services.chain_adapters.base import TransactionAdapter
from swap_classifier.services.chain_adapters.shyft import ShyftAdapter
from swap_classifier.services.chain_adapters.solana import SolanaRpcAdapter
from swap_classifier.services.classifier.pipeline import SwapClassifier
from swap_classifier.services.split_storage_mapper import map_leg, map_split_pair
from swap_classifier.services.value_gate import MinimumValueGate
from swap_classifier.utils.errors import InvalidTransactionError, SwapClassifierError

router = APIRouter()

ADAPTERS = {
    "shyft": ShyftAdapter(),
    "rpc": SolanaRpcAdapter(),
}


@lru_cache
def get_classifier() -> SwapClassifier:
    return SwapClassifier(settings.classifier_config())


def _to_transaction(payload: dict, payload_format: PayloadFormat) -> RawTransaction:
    adapter: Optional[TransactionAdapter] = ADAPTERS.get(payload_format)
    if adapter is None:
        return RawTransaction.from_payload(payload)
    return adapter.parse_transaction(payload)


def _gate(results: List[ClassifierResult], prices) -> List[ClassifierResult]:
    if not prices:
        return results
    gate = MinimumValueGate(settings.minimum_value_threshold_usd)
    return [gate.apply(result, prices) for result in results]


def _persist(results: List[ClassifierResult], prices) -> None:
    """Store accepted results; rejections are never stored."""
    repository = records.get_repository()
    for result in results:
        match result:
            case ParsedResult(leg=leg):
                repository.save(map_leg(leg, ClassificationSource.PARSER, prices), leg)
            case SplitResult(pair=pair):
                sell, buy = map_split_pair(pair, prices)
                repository.save_split_pair(sell, buy, pair.sell_record, pair.buy_record)
            case RejectedResult():
                continue
            case other:
                assert_never(other)


def _check_persist(persist: bool, prices) -> None:
    if persist and not prices:
        raise HTTPException(status_code=400, detail="USD prices are required to store records")


@router.post("", response_model=ClassifierResult)
def classify_transaction(request: ClassifyRequest):
    """
    Classify one transaction as a BUY, SELL, split swap or rejection.

    When prices are supplied, parsed swaps below the configured USD
    minimum are rejected. With `persist`, accepted results are stored.
    """
    _check_persist(request.persist, request.prices)
    try:
        tx = _to_transaction(request.transaction, request.format)
        result = get_classifier().classify(tx, request.sol_to_quote_rates)
        result = _gate([result], request.prices)[0]
        if request.persist:
            _persist([result], request.prices)
    except InvalidTransactionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SwapClassifierError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return result


@router.post("/batch", response_model=BatchClassifyResponse)
def classify_batch(request: BatchClassifyRequest):
    """
    Classify a batch of transactions, once per signature.

    Stored results are written one transaction at a time; a failure stops
    the batch but keeps what was already stored.
    """
    if len(request.transactions) > settings.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {settings.max_batch_size} transactions per batch"
        )
    _check_persist(request.persist, request.prices)

    try:
        txs = [_to_transaction(payload, request.format) for payload in request.transactions]
        results = get_classifier().classify_many(txs, request.sol_to_quote_rates)
        results = _gate(results, request.prices)
        if request.persist:
            _persist(results, request.prices)
    except InvalidTransactionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SwapClassifierError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BatchClassifyResponse(
        results=results,
        parsed=sum(1 for r in results if r.kind == "parsed"),
        split=sum(1 for r in results if r.kind == "split"),
        rejected=sum(1 for r in results if r.kind == "rejected"),
    )
