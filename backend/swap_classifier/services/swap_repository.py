"""Persistence of swap records with atomic split-pair writes."""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from swap_classifier.db import SwapRecordRow
from swap_classifier.models.record import (
    LEGACY_BOTH_TYPE,
    ClassificationSource,
    PersistedSwapRecord,
    RecordAmount,
    RecordSolAmount,
    RecordTokenSide,
    RecordTransaction,
    RecordType,
)
from swap_classifier.models.swap import SwapLeg
from swap_classifier.services.storage_validator import ensure_valid, ensure_valid_split
from swap_classifier.utils.errors import SplitPersistenceError, SwapClassifierError

logger = logging.getLogger(__name__)

SPLIT_SOURCES = (ClassificationSource.SPLIT_SELL.value, ClassificationSource.SPLIT_BUY.value)


def to_row(record: PersistedSwapRecord) -> SwapRecordRow:
    return SwapRecordRow(
        signature=record.signature,
        type=record.type.value,
        classification_source=record.classification_source.value,
        swapper=record.swapper,
        protocol=record.protocol,
        timestamp=record.timestamp,
        buy_amount=record.amount.buy_amount,
        sell_amount=record.amount.sell_amount,
        buy_sol_amount=record.sol_amount.buy_sol_amount,
        sell_sol_amount=record.sol_amount.sell_sol_amount,
        token_in_mint=record.transaction.token_in.mint,
        token_in_symbol=record.transaction.token_in.symbol,
        token_in_amount=record.transaction.token_in.amount,
        token_out_mint=record.transaction.token_out.mint,
        token_out_symbol=record.transaction.token_out.symbol,
        token_out_amount=record.transaction.token_out.amount,
        confidence=record.confidence,
    )


def from_row(row: SwapRecordRow) -> PersistedSwapRecord:
    return PersistedSwapRecord(
        signature=row.signature,
        type=RecordType(row.type),
        classification_source=ClassificationSource(row.classification_source),
        swapper=row.swapper,
        protocol=row.protocol,
        timestamp=row.timestamp,
        amount=RecordAmount(buy_amount=row.buy_amount, sell_amount=row.sell_amount),
        sol_amount=RecordSolAmount(buy_sol_amount=row.buy_sol_amount, sell_sol_amount=row.sell_sol_amount),
        transaction=RecordTransaction(
            token_in=RecordTokenSide(mint=row.token_in_mint, symbol=row.token_in_symbol, amount=row.token_in_amount),
            token_out=RecordTokenSide(mint=row.token_out_mint, symbol=row.token_out_symbol, amount=row.token_out_amount),
        ),
        confidence=row.confidence,
    )


class SwapRecordRepository:
    """Stores swap records keyed by (signature, type)."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save(self, record: PersistedSwapRecord, leg: Optional[SwapLeg] = None) -> None:
        """
        Store a single record.

        Args:
            record: Record of a plain BUY or SELL
            leg: Source leg; when given the record must agree with its
                balance-truth amounts

        Raises:
            RecordValidationError: If the record violates storage invariants
            SwapClassifierError: If the write fails
        """
        ensure_valid(record, leg)
        try:
            with self.session_factory() as session, session.begin():
                session.add(to_row(record))
        except SQLAlchemyError as e:
            logger.error(f"[STORAGE] {record.signature}: write failed: {e}")
            raise SwapClassifierError(f"Failed to store {record.signature}: {e}") from e
        logger.info(f"[STORAGE] {record.signature}: stored {record.type.value}")

    def save_split_pair(
        self,
        sell: PersistedSwapRecord,
        buy: PersistedSwapRecord,
        sell_leg: Optional[SwapLeg] = None,
        buy_leg: Optional[SwapLeg] = None,
    ) -> None:
        """
        Store both legs of a split swap in one transaction.

        Either both rows are committed or neither is.

        Args:
            sell: SELL leg record
            buy: BUY leg record
            sell_leg: Source SELL leg, checked against its record when given
            buy_leg: Source BUY leg, checked against its record when given

        Raises:
            RecordValidationError: If the pair violates storage invariants
            SplitPersistenceError: If the write failed and was rolled back
        """
        ensure_valid_split(sell, buy, sell_leg, buy_leg)
        try:
            with self.session_factory() as session, session.begin():
                session.add(to_row(sell))
                session.flush()
                session.add(to_row(buy))
        except SQLAlchemyError as e:
            logger.error(f"[STORAGE] {sell.signature}: split write rolled back: {e}")
            raise SplitPersistenceError(
                f"Split pair {sell.signature} was not stored; both legs rolled back"
            ) from e
        logger.info(f"[STORAGE] {sell.signature}: stored split pair")

    def find_by_signature(self, signature: str) -> List[PersistedSwapRecord]:
        """Records for a signature, SELL before BUY."""
        with self.session_factory() as session:
            rows = session.scalars(
                select(SwapRecordRow)
                .where(SwapRecordRow.signature == signature, SwapRecordRow.type != LEGACY_BOTH_TYPE)
                .order_by(SwapRecordRow.type.desc())
            ).all()
            return [from_row(row) for row in rows]

    def find_incomplete_splits(self) -> List[str]:
        """Signatures with split provenance but only one stored leg."""
        with self.session_factory() as session:
            return list(session.scalars(
                select(SwapRecordRow.signature)
                .where(SwapRecordRow.classification_source.in_(SPLIT_SOURCES))
                .group_by(SwapRecordRow.signature)
                .having(func.count(SwapRecordRow.id) == 1)
                .order_by(SwapRecordRow.signature)
            ).all())

    def find_legacy_both_records(self) -> List[str]:
        """Signatures still stored with the legacy combined type."""
        with self.session_factory() as session:
            return list(session.scalars(
                select(SwapRecordRow.signature)
                .where(SwapRecordRow.type == LEGACY_BOTH_TYPE)
                .order_by(SwapRecordRow.signature)
            ).all())
