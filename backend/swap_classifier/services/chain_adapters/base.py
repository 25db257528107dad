"""Abstract base class for transaction adapters."""
from abc import ABC, abstractmethod

from swap_classifier.models.transaction import RawTransaction, is_valid_mint


class TransactionAdapter(ABC):
    """Turns a provider-specific payload into a RawTransaction."""

    name: str = "base"

    @abstractmethod
    def parse_transaction(self, payload: dict) -> RawTransaction:
        """
        Parse a provider payload into a RawTransaction.

        Args:
            payload: Decoded JSON returned by the provider

        Returns:
            Validated RawTransaction

        Raises:
            InvalidTransactionError: If the payload lacks required fields
        """
        pass

    def validate_address(self, address: str) -> bool:
        """
        Validate a Solana address format.

        Solana addresses are base58 encoded public keys, 32-44 characters.

        Args:
            address: Address to validate

        Returns:
            True if address is valid
        """
        return bool(address) and is_valid_mint(address)
