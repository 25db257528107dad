"""Invariant checks for storage records before they are written."""
from typing import Any, List, Optional

from pydantic import BaseModel

from swap_classifier.models.record import ClassificationSource, PersistedSwapRecord, RecordType
from swap_classifier.models.swap import Direction, SwapLeg
from swap_classifier.services.split_storage_mapper import leg_sol_amount
from swap_classifier.utils.errors import RecordValidationError


class ValidationIssue(BaseModel):
    """One violated invariant."""
    field: str
    issue: str
    expected_value: Any = None
    actual_value: Any = None


def validate_record(record: PersistedSwapRecord, leg: Optional[SwapLeg] = None) -> List[ValidationIssue]:
    """
    Check a record's amounts and SOL fields.

    Args:
        record: Record about to be stored
        leg: Source leg; enables balance-truth comparisons when given

    Returns:
        List of issues, empty when the record is valid
    """
    issues: List[ValidationIssue] = []
    buy, sell = record.amount.buy_amount, record.amount.sell_amount

    for field, value in (("amount.buy_amount", buy), ("amount.sell_amount", sell)):
        if value < 0:
            issues.append(ValidationIssue(field=field, issue="Amount cannot be negative",
                                          expected_value=">= 0", actual_value=str(value)))

    own, other = (buy, sell) if record.type is RecordType.BUY else (sell, buy)
    if own == 0 or other != 0:
        issues.append(ValidationIssue(
            field="amount",
            issue="Exactly the record's own side must be non-zero",
            expected_value=f"{record.type.value} side > 0, other side 0",
            actual_value={"buy_amount": str(buy), "sell_amount": str(sell)},
        ))

    own_sol, other_sol = (
        (record.sol_amount.buy_sol_amount, record.sol_amount.sell_sol_amount)
        if record.type is RecordType.BUY
        else (record.sol_amount.sell_sol_amount, record.sol_amount.buy_sol_amount)
    )
    if other_sol is not None:
        issues.append(ValidationIssue(field="sol_amount", issue="Opposite SOL side must be null",
                                      expected_value=None, actual_value=str(other_sol)))
    if own_sol is not None and own_sol < 0:
        issues.append(ValidationIssue(field="sol_amount", issue="SOL amount cannot be negative",
                                      expected_value=">= 0", actual_value=str(own_sol)))

    if leg is None:
        return issues

    expected_type = RecordType.BUY if leg.direction is Direction.BUY else RecordType.SELL
    if record.type is not expected_type:
        issues.append(ValidationIssue(field="type", issue="Type does not match leg direction",
                                      expected_value=expected_type.value, actual_value=record.type.value))
    if record.signature != leg.signature:
        issues.append(ValidationIssue(field="signature", issue="Signature does not match leg",
                                      expected_value=leg.signature, actual_value=record.signature))

    expected_sol = leg_sol_amount(leg)
    if expected_sol is None and own_sol is not None:
        issues.append(ValidationIssue(field="sol_amount", issue="SOL amount set but SOL is not involved",
                                      expected_value=None, actual_value=str(own_sol)))
    elif expected_sol is not None and own_sol != expected_sol:
        issues.append(ValidationIssue(field="sol_amount", issue="SOL amount does not match balance delta",
                                      expected_value=str(expected_sol),
                                      actual_value=None if own_sol is None else str(own_sol)))

    base_side = record.transaction.token_out if leg.direction is Direction.BUY else record.transaction.token_in
    if base_side.mint != leg.base_asset.mint or base_side.amount != leg.amounts.base_amount:
        issues.append(ValidationIssue(field="transaction", issue="Base token side does not match leg",
                                      expected_value=str(leg.amounts.base_amount),
                                      actual_value=str(base_side.amount)))
    return issues


def validate_split_records(
    sell: PersistedSwapRecord,
    buy: PersistedSwapRecord,
    sell_leg: Optional[SwapLeg] = None,
    buy_leg: Optional[SwapLeg] = None,
) -> List[ValidationIssue]:
    """
    Check that two records form one split pair.

    Args:
        sell: SELL leg record
        buy: BUY leg record
        sell_leg: Source SELL leg, checked against its record when given
        buy_leg: Source BUY leg, checked against its record when given

    Returns:
        List of issues, empty when the pair is valid
    """
    issues = validate_record(sell, sell_leg) + validate_record(buy, buy_leg)
    if sell.signature != buy.signature:
        issues.append(ValidationIssue(field="signature", issue="Split legs must share a signature",
                                      expected_value=sell.signature, actual_value=buy.signature))
    if sell.type is not RecordType.SELL or buy.type is not RecordType.BUY:
        issues.append(ValidationIssue(field="type", issue="Split legs must be one sell and one buy",
                                      expected_value=["sell", "buy"],
                                      actual_value=[sell.type.value, buy.type.value]))
    if (sell.classification_source, buy.classification_source) != (
        ClassificationSource.SPLIT_SELL, ClassificationSource.SPLIT_BUY
    ):
        issues.append(ValidationIssue(field="classification_source", issue="Split legs need split provenance",
                                      expected_value=[ClassificationSource.SPLIT_SELL.value,
                                                      ClassificationSource.SPLIT_BUY.value],
                                      actual_value=[sell.classification_source.value,
                                                    buy.classification_source.value]))
    return issues


def ensure_valid(record: PersistedSwapRecord, leg: Optional[SwapLeg] = None) -> None:
    """
    Raise when a record violates storage invariants.

    Raises:
        RecordValidationError: With the list of issues
    """
    issues = validate_record(record, leg)
    if issues:
        raise RecordValidationError(
            f"Record {record.signature}/{record.type.value} failed validation",
            [issue.model_dump() for issue in issues],
        )


def ensure_valid_split(
    sell: PersistedSwapRecord,
    buy: PersistedSwapRecord,
    sell_leg: Optional[SwapLeg] = None,
    buy_leg: Optional[SwapLeg] = None,
) -> None:
    """
    Raise when a split pair violates storage invariants.

    Raises:
        RecordValidationError: With the list of issues
    """
    issues = validate_split_records(sell, buy, sell_leg, buy_leg)
    if issues:
        raise RecordValidationError(
            f"Split pair {sell.signature} failed validation",
            [issue.model_dump() for issue in issues],
        )
