"""
Custom exceptions for the prediction markets client.

Provides typed exceptions for validation, contract reverts and transport failures.
"""

from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .contracts.errors import ContractErrorKind


class PredictionMarketsError(Exception):
    """Base exception for all prediction markets errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(PredictionMarketsError):
    """Input validation failed before anything was sent to the network."""
    pass


class ExpiredDeadlineError(ValidationError):
    """Transaction deadline is already in the past."""

    def __init__(self, message: str, deadline: Optional[int] = None):
        super().__init__(message, {"deadline": deadline})
        self.deadline = deadline


# Contract exceptions
class ContractError(PredictionMarketsError):
    """Base exception for contract interactions."""
    pass


class DomainRevertError(ContractError):
    """Contract reverted with a known custom error."""

    def __init__(self, error: "ContractErrorKind"):
        super().__init__(error.message, {"error": error.name, "args": error.args})
        self.error = error

    @property
    def name(self) -> str:
        return self.error.name


class UnmatchedRevertError(ContractError):
    """Contract reverted with an error no known ABI describes."""

    def __init__(self, reason: str, data: Optional[str] = None):
        super().__init__(reason, {"data": data})
        self.reason = reason
        self.data = data


class MissingEventError(ContractError):
    """Transaction succeeded but did not emit the expected event."""

    def __init__(self, event_name: str, tx_hash: Optional[str] = None):
        super().__init__(f"{event_name} event not found", {"event": event_name, "tx_hash": tx_hash})
        self.event_name = event_name
        self.tx_hash = tx_hash


class TransactionFailedError(ContractError):
    """Transaction was mined with a failed status and no decodable reason."""

    def __init__(self, message: str, tx_hash: Optional[str] = None,
                 block_number: Optional[int] = None):
        super().__init__(message, {"tx_hash": tx_hash, "block_number": block_number})
        self.tx_hash = tx_hash
        self.block_number = block_number


class DeploymentError(ContractError):
    """Contract deployment did not produce an address."""
    pass


class DecodingError(ContractError):
    """On-chain value could not be decoded into a client type."""
    pass


# Infrastructure exceptions
class TransportError(PredictionMarketsError):
    """RPC request failed (connection refused, timeout, bad response)."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message, {"endpoint": endpoint})
        self.endpoint = endpoint


class ConfigurationError(PredictionMarketsError):
    """Client configuration is missing or inconsistent."""
    pass


class ChainNotConfiguredError(ConfigurationError):
    """No connection or contracts registered for a chain."""

    def __init__(self, message: str, chain_id: Optional[int] = None):
        super().__init__(message, {"chain_id": chain_id})
        self.chain_id = chain_id


class ArtifactError(PredictionMarketsError):
    """Compiled contract artifact missing or malformed."""

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message, {"name": name})
        self.name = name
