"""
Contract binding: typed access to one deployed contract.

Wraps a web3 Contract with the three primitives the clients are built on:
read-only calls, state-changing transactions that wait for their receipt,
and paginated event log scans. Reverts are translated into client
exceptions here so callers never see raw web3 errors.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from hexbytes import HexBytes
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.logs import DISCARD
from web3.types import EventData, TxReceipt

from ..connection import Connection, transport_errors
from ..exceptions import ConfigurationError, ContractError, MissingEventError, TransactionFailedError
from ..metrics import track_log_request, track_transaction
from ..utils.validators import validate_address
from .errors import translate_contract_error

logger = logging.getLogger(__name__)

DEFAULT_LOG_CHUNK_SIZE = 10_000


@contextmanager
def contract_errors(endpoint: Optional[str] = None) -> Iterator[None]:
    """Translate reverts and transport failures raised inside the block."""
    try:
        with transport_errors(endpoint):
            yield
    except ContractLogicError as e:
        raise translate_contract_error(e) from e


def wait_for_receipt(connection: Connection, tx_hash: bytes, operation: str) -> TxReceipt:
    """
    Wait for a transaction receipt and fail on a reverted status.

    A reverted transaction is replayed with eth_call against the state before
    its block to recover the revert data.

    Raises:
        DomainRevertError / UnmatchedRevertError: If the replay reverts
        TransactionFailedError: If no revert reason could be recovered
        TimeExhausted: If the receipt does not arrive in time
    """
    web3 = connection.web3
    tx_hex = HexBytes(tx_hash).to_0x_hex()

    try:
        with transport_errors(connection.endpoint):
            receipt = web3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=connection.receipt_timeout
            )
    except TimeExhausted:
        logger.error(f"{operation} timeout: {tx_hex}")
        raise

    if receipt["status"] != 1:
        block_number = receipt["blockNumber"]
        logger.error(f"{operation} reverted: {tx_hex} (block {block_number})")

        with contract_errors(connection.endpoint):
            tx = web3.eth.get_transaction(tx_hash)
            replay = {"from": tx["from"], "data": tx["input"], "value": tx["value"]}
            if tx.get("to"):
                replay["to"] = tx["to"]
            web3.eth.call(replay, max(block_number - 1, 0))

        raise TransactionFailedError(
            f"{operation} failed: {tx_hex}",
            tx_hash=tx_hex,
            block_number=block_number
        )

    logger.info(
        f"{operation} confirmed: {tx_hex} "
        f"(block {receipt['blockNumber']}, gas {receipt['gasUsed']})"
    )
    return receipt


class ContractBinding:
    """
    One deployed contract on one connection.

    Args:
        connection: Chain connection
        address: Contract address
        abi: Contract ABI
        start_block: First block to scan for this contract's events
        default_sender: Sender for transactions when none is passed
        log_chunk_size: Max block span per eth_getLogs request
    """

    def __init__(
        self,
        connection: Connection,
        address: str,
        abi: List[Dict[str, Any]],
        start_block: Optional[int] = None,
        default_sender: Optional[str] = None,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE
    ):
        self.connection = connection
        self.address = validate_address(address, "contract address")
        self.abi = abi
        self.contract = connection.web3.eth.contract(address=self.address, abi=abi)
        self.start_block = start_block
        self.default_sender = (
            validate_address(default_sender, "sender") if default_sender else None
        )
        self.log_chunk_size = log_chunk_size

    @property
    def web3(self):
        return self.connection.web3

    def set_start_block(self, block_number: Optional[int]) -> None:
        self.start_block = block_number

    def set_default_sender(self, sender: Optional[str]) -> None:
        self.default_sender = validate_address(sender, "sender") if sender else None

    def resolve_sender(self, sender: Optional[str] = None) -> str:
        """
        Sender for a transaction: explicit, then the binding's default, then
        the connection's default account.

        Raises:
            ConfigurationError: If no sender is available
        """
        if sender:
            return validate_address(sender, "sender")
        if self.default_sender:
            return self.default_sender
        account = self.connection.get_default_account()
        if account is None:
            raise ConfigurationError("No sender account configured")
        return account

    def call(self, fn_name: str, *args: Any, block_identifier: Any = "latest") -> Any:
        """Execute a view/pure function with eth_call."""
        fn = getattr(self.contract.functions, fn_name)(*args)
        with contract_errors(self.connection.endpoint):
            return fn.call(block_identifier=block_identifier)

    def send(
        self,
        fn_name: str,
        *args: Any,
        value: int = 0,
        sender: Optional[str] = None
    ) -> TxReceipt:
        """
        Submit a transaction and wait for its receipt.

        Args:
            fn_name: Contract function name
            *args: Wire-format arguments
            value: Wei to attach (payable functions only)
            sender: Sending account, see resolve_sender

        Returns:
            The mined receipt (status 1)
        """
        from_address = self.resolve_sender(sender)
        fn = getattr(self.contract.functions, fn_name)(*args)

        tx_params: Dict[str, Any] = {"from": from_address}
        if value:
            tx_params["value"] = value

        start = time.time()
        status = "error"
        try:
            with contract_errors(self.connection.endpoint):
                tx_hash = fn.transact(tx_params)

            logger.debug(f"Sent {fn_name} to {self.address}: {HexBytes(tx_hash).to_0x_hex()}")
            receipt = wait_for_receipt(self.connection, tx_hash, fn_name)
            status = "success"
            return receipt
        except ContractError:
            status = "reverted"
            raise
        finally:
            track_transaction(fn_name, status, time.time() - start)

    def get_logs(
        self,
        event_name: str,
        argument_filters: Optional[Dict[str, Any]] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None
    ) -> List[EventData]:
        """
        Fetch decoded event logs in chunks of log_chunk_size blocks.

        Args:
            event_name: Event to scan for
            argument_filters: Indexed argument filters, e.g. {"_buyer": user}
            from_block: First block (defaults to start_block, then 0)
            to_block: Last block inclusive (defaults to latest)
        """
        event = getattr(self.contract.events, event_name)()
        start = from_block if from_block is not None else (self.start_block or 0)
        end = to_block if to_block is not None else self.connection.get_block_number()

        logs: List[EventData] = []
        chunk_start = start
        while chunk_start <= end:
            chunk_end = min(chunk_start + self.log_chunk_size - 1, end)
            track_log_request(event_name)
            with contract_errors(self.connection.endpoint):
                logs.extend(event.get_logs(
                    argument_filters=argument_filters,
                    from_block=chunk_start,
                    to_block=chunk_end
                ))
            chunk_start = chunk_end + 1

        logger.debug(f"Fetched {len(logs)} {event_name} logs from blocks {start}-{end}")
        return logs

    def extract_events(self, receipt: TxReceipt, event_name: str) -> List[EventData]:
        """Decode every occurrence of an event emitted by this contract in a receipt."""
        event = getattr(self.contract.events, event_name)()
        return [
            log for log in event.process_receipt(receipt, errors=DISCARD)
            if log["address"] == self.address
        ]

    def extract_event(self, receipt: TxReceipt, event_name: str) -> EventData:
        """
        First occurrence of an event in a receipt.

        Raises:
            MissingEventError: If the receipt does not contain the event
        """
        events = self.extract_events(receipt, event_name)
        if not events:
            tx_hash = receipt.get("transactionHash")
            raise MissingEventError(
                event_name,
                HexBytes(tx_hash).to_0x_hex() if tx_hash is not None else None
            )
        return events[0]

    def __repr__(self) -> str:
        return f"ContractBinding(address={self.address})"
