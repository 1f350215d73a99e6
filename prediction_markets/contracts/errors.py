"""
Decoding of contract revert data into typed errors.

Every custom error declared by the Market, MarketAMM, MarketFactory and
CentralizedOracle contracts has a frozen dataclass here carrying its decoded
arguments and a human-readable message. Errors declared by several contracts
share one class.
"""

import logging
from dataclasses import astuple, dataclass
from typing import ClassVar, Dict, Optional, Tuple, Type, Union

from eth_abi import decode
from eth_abi.exceptions import DecodingError as AbiDecodingError
from eth_utils import keccak, to_checksum_address
from hexbytes import HexBytes

from ..exceptions import ContractError, DomainRevertError, UnmatchedRevertError
from .abi import ERROR_ABIS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractErrorKind:
    """Base for decoded custom errors."""
    name: ClassVar[str] = ""
    template: ClassVar[str] = ""

    @property
    def args(self) -> tuple:
        return astuple(self)

    @property
    def message(self) -> str:
        return self.template.format(**self.__dict__)


# Market
@dataclass(frozen=True)
class AmountMismatch(ContractErrorKind):
    name: ClassVar[str] = "AmountMismatch"
    template: ClassVar[str] = "Amount {actual} does not match expected amount {expected}"
    expected: int
    actual: int


@dataclass(frozen=True)
class DeadlinePassed(ContractErrorKind):
    name: ClassVar[str] = "DeadlinePassed"
    template: ClassVar[str] = "Transaction deadline has passed"


@dataclass(frozen=True)
class InsufficientShares(ContractErrorKind):
    name: ClassVar[str] = "InsufficientShares"
    template: ClassVar[str] = "Insufficient shares"


@dataclass(frozen=True)
class InvalidCloseTime(ContractErrorKind):
    name: ClassVar[str] = "InvalidCloseTime"
    template: ClassVar[str] = "Invalid close time"


@dataclass(frozen=True)
class InvalidFeeBPS(ContractErrorKind):
    name: ClassVar[str] = "InvalidFeeBPS"
    template: ClassVar[str] = "Invalid fee BPS"


@dataclass(frozen=True)
class InvalidMarketState(ContractErrorKind):
    name: ClassVar[str] = "InvalidMarketState"
    template: ClassVar[str] = "Invalid market state"


@dataclass(frozen=True)
class InvalidResolveDelay(ContractErrorKind):
    name: ClassVar[str] = "InvalidResolveDelay"
    template: ClassVar[str] = "Invalid resolve delay. Must be between {min_resolve_delay} and {max_resolve_delay}"
    min_resolve_delay: int
    max_resolve_delay: int


@dataclass(frozen=True)
class MarketCloseTimeNotPassed(ContractErrorKind):
    name: ClassVar[str] = "MarketCloseTimeNotPassed"
    template: ClassVar[str] = "Market close time has not passed"


@dataclass(frozen=True)
class MarketClosed(ContractErrorKind):
    name: ClassVar[str] = "MarketClosed"
    template: ClassVar[str] = "Market is closed"


@dataclass(frozen=True)
class MarketResolveDelayNotPassed(ContractErrorKind):
    name: ClassVar[str] = "MarketResolveDelayNotPassed"
    template: ClassVar[str] = "Market resolve delay has not passed"


@dataclass(frozen=True)
class MaxSharesNotMet(ContractErrorKind):
    name: ClassVar[str] = "MaxSharesNotMet"
    template: ClassVar[str] = "Maximum shares not met"


@dataclass(frozen=True)
class MinimumSharesNotMet(ContractErrorKind):
    name: ClassVar[str] = "MinimumSharesNotMet"
    template: ClassVar[str] = "Minimum shares not met"


@dataclass(frozen=True)
class NoLiquidityToClaim(ContractErrorKind):
    name: ClassVar[str] = "NoLiquidityToClaim"
    template: ClassVar[str] = "No liquidity to claim"


@dataclass(frozen=True)
class NoRewardsToClaim(ContractErrorKind):
    name: ClassVar[str] = "NoRewardsToClaim"
    template: ClassVar[str] = "No rewards to claim"


@dataclass(frozen=True)
class OnlyBinaryMarketSupported(ContractErrorKind):
    name: ClassVar[str] = "OnlyBinaryMarketSupported"
    template: ClassVar[str] = "Only binary market supported"


@dataclass(frozen=True)
class OracleNotResolved(ContractErrorKind):
    name: ClassVar[str] = "OracleNotResolved"
    template: ClassVar[str] = "Oracle not resolved"


@dataclass(frozen=True)
class TransferFailed(ContractErrorKind):
    name: ClassVar[str] = "TransferFailed"
    template: ClassVar[str] = "Transfer failed"


# MarketAMM
@dataclass(frozen=True)
class InsufficientLiquidity(ContractErrorKind):
    name: ClassVar[str] = "InsufficientLiquidity"
    template: ClassVar[str] = "The pool does not have enough liquidity to complete the trade."


# MarketFactory, proxies and shared OpenZeppelin errors
@dataclass(frozen=True)
class AddressEmptyCode(ContractErrorKind):
    name: ClassVar[str] = "AddressEmptyCode"
    template: ClassVar[str] = "The address {target} has empty code."
    target: str


@dataclass(frozen=True)
class ERC1967InvalidImplementation(ContractErrorKind):
    name: ClassVar[str] = "ERC1967InvalidImplementation"
    template: ClassVar[str] = "The implementation address {implementation} is invalid."
    implementation: str


@dataclass(frozen=True)
class ERC1967NonPayable(ContractErrorKind):
    name: ClassVar[str] = "ERC1967NonPayable"
    template: ClassVar[str] = "The function is non-payable."


@dataclass(frozen=True)
class FailedCall(ContractErrorKind):
    name: ClassVar[str] = "FailedCall"
    template: ClassVar[str] = "The call has failed."


@dataclass(frozen=True)
class FailedDeployment(ContractErrorKind):
    name: ClassVar[str] = "FailedDeployment"
    template: ClassVar[str] = "The deployment has failed."


@dataclass(frozen=True)
class IndexOutOfBounds(ContractErrorKind):
    name: ClassVar[str] = "IndexOutOfBounds"
    template: ClassVar[str] = "The index is out of bounds."


@dataclass(frozen=True)
class InsufficientBalance(ContractErrorKind):
    name: ClassVar[str] = "InsufficientBalance"
    template: ClassVar[str] = "Insufficient balance. Balance: {balance}, Needed: {needed}."
    balance: int
    needed: int


@dataclass(frozen=True)
class InvalidInitialization(ContractErrorKind):
    name: ClassVar[str] = "InvalidInitialization"
    template: ClassVar[str] = "The initialization is invalid."


@dataclass(frozen=True)
class NotInitializing(ContractErrorKind):
    name: ClassVar[str] = "NotInitializing"
    template: ClassVar[str] = "The contract is not initializing."


@dataclass(frozen=True)
class OwnableInvalidOwner(ContractErrorKind):
    name: ClassVar[str] = "OwnableInvalidOwner"
    template: ClassVar[str] = "The owner address {owner} is invalid."
    owner: str


@dataclass(frozen=True)
class OwnableUnauthorizedAccount(ContractErrorKind):
    name: ClassVar[str] = "OwnableUnauthorizedAccount"
    template: ClassVar[str] = "The account address {account} is unauthorized."
    account: str


@dataclass(frozen=True)
class UUPSUnauthorizedCallContext(ContractErrorKind):
    name: ClassVar[str] = "UUPSUnauthorizedCallContext"
    template: ClassVar[str] = "The call context is unauthorized for UUPS."


@dataclass(frozen=True)
class UUPSUnsupportedProxiableUUID(ContractErrorKind):
    name: ClassVar[str] = "UUPSUnsupportedProxiableUUID"
    template: ClassVar[str] = "The proxiable UUID slot {slot} is unsupported."
    slot: str


@dataclass(frozen=True)
class ZeroAddress(ContractErrorKind):
    name: ClassVar[str] = "ZeroAddress"
    template: ClassVar[str] = "The address is zero."


# CentralizedOracle
@dataclass(frozen=True)
class OutcomeNotResolvedYet(ContractErrorKind):
    name: ClassVar[str] = "OutcomeNotResolvedYet"
    template: ClassVar[str] = "Outcome not resolved yet"


ERROR_KINDS: Dict[str, Type[ContractErrorKind]] = {
    kind.name: kind for kind in ContractErrorKind.__subclasses__()
}


def _error_signature(fragment: dict) -> str:
    types = ",".join(param["type"] for param in fragment["inputs"])
    return f"{fragment['name']}({types})"


def _build_selector_table() -> Dict[bytes, Tuple[str, Tuple[str, ...]]]:
    """Map 4-byte selectors to (error name, argument types) across all known ABIs."""
    table = {}
    for abi in ERROR_ABIS:
        for fragment in abi:
            if fragment.get("type") != "error":
                continue
            selector = keccak(text=_error_signature(fragment))[:4]
            table[selector] = (
                fragment["name"],
                tuple(param["type"] for param in fragment["inputs"]),
            )
    return table


ERROR_SELECTORS = _build_selector_table()


def _normalize_value(abi_type: str, value):
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type.startswith("bytes"):
        return HexBytes(value).to_0x_hex()
    return value


def decode_revert(data: Union[str, bytes, None]) -> Optional[ContractErrorKind]:
    """
    Decode raw revert data into a typed error.

    Args:
        data: Revert data as hex string or bytes (selector + ABI-encoded args)

    Returns:
        The decoded error, or None if no known error matches
    """
    if not data:
        return None

    try:
        raw = HexBytes(data)
    except (ValueError, TypeError):
        return None

    if len(raw) < 4:
        return None

    entry = ERROR_SELECTORS.get(bytes(raw[:4]))
    if entry is None:
        return None

    name, types = entry
    kind = ERROR_KINDS.get(name)
    if kind is None:
        logger.warning(f"No error class registered for {name}")
        return None

    try:
        values = decode(list(types), bytes(raw[4:])) if types else ()
    except AbiDecodingError as e:
        logger.warning(f"Failed to decode arguments of {name}: {e}")
        return None

    return kind(*(_normalize_value(t, v) for t, v in zip(types, values)))


def translate_contract_error(exc: Exception) -> ContractError:
    """
    Map a web3 contract exception to a client exception.

    Known custom errors become DomainRevertError; anything else keeps the
    node's revert reason in an UnmatchedRevertError.
    """
    data = getattr(exc, "data", None)
    if isinstance(data, dict):
        data = data.get("data")

    if isinstance(data, (str, bytes)):
        kind = decode_revert(data)
        if kind is not None:
            return DomainRevertError(kind)

    reason = getattr(exc, "message", None) or str(exc)
    return UnmatchedRevertError(reason, data if isinstance(data, str) else None)
