"""
Blockchain connections.

A Connection wraps one Web3 instance: the RPC endpoint, the signing accounts
added to it and the default sender. ConnectionRegistry holds one connection
per chain id and is built once at startup.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

import requests
from eth_account import Account
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .config import LOCAL_RPC_URL, PredictionMarketsSettings, get_chains, get_settings
from .exceptions import ChainNotConfiguredError, ConfigurationError, TransportError
from .utils.validators import validate_address

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_RECEIPT_TIMEOUT = 120.0


@contextmanager
def transport_errors(endpoint: Optional[str]) -> Iterator[None]:
    """Re-raise HTTP transport failures as TransportError."""
    try:
        yield
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
        logger.error(f"RPC request failed: {type(e).__name__}")
        raise TransportError(f"RPC request failed: {type(e).__name__}", endpoint) from e


class Connection:
    """
    Handle to one chain.

    Accounts added with add_account sign locally through web3's signing
    middleware. Accounts are only ever added, never removed.
    """

    def __init__(
        self,
        web3: Web3,
        endpoint: Optional[str] = None,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    ):
        self.web3 = web3
        self.endpoint = endpoint
        self.receipt_timeout = receipt_timeout
        self._local_accounts: List[str] = []
        self._lock = threading.Lock()

    def add_account(self, private_key: str) -> str:
        """
        Register a private key for signing.

        The first account added becomes the default sender if none is set.

        Returns:
            Checksum address of the account
        """
        account = Account.from_key(private_key)

        with self._lock:
            if account.address not in self._local_accounts:
                self.web3.middleware_onion.add(
                    SignAndSendRawMiddlewareBuilder.build(account),
                    name=f"signer_{account.address}"
                )
                self._local_accounts.append(account.address)
                logger.info(f"Added signing account {account.address}")

            if not isinstance(self.web3.eth.default_account, str):
                self.web3.eth.default_account = account.address

        return account.address

    def get_accounts(self) -> List[str]:
        """Addresses of the locally signing accounts, in insertion order."""
        return list(self._local_accounts)

    def get_default_account(self) -> Optional[str]:
        account = self.web3.eth.default_account
        return account if isinstance(account, str) else None

    def set_default_account(self, address: str) -> None:
        self.web3.eth.default_account = validate_address(address, "default account")

    def get_chain_id(self) -> int:
        with transport_errors(self.endpoint):
            return self.web3.eth.chain_id

    def get_block_number(self) -> int:
        with transport_errors(self.endpoint):
            return self.web3.eth.block_number

    def __repr__(self) -> str:
        return f"{type(self).__name__}(accounts={len(self._local_accounts)})"


class HttpConnection(Connection):
    """Connection over JSON-RPC HTTP."""

    def __init__(
        self,
        rpc_url: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    ):
        web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        super().__init__(web3, endpoint=rpc_url, receipt_timeout=receipt_timeout)


class AnvilConnection(HttpConnection):
    """
    Connection to a local development node.

    The node's unlocked accounts are listed after the local signers, and the
    first of them is the default sender until an account is added.
    """

    def __init__(
        self,
        rpc_url: str = LOCAL_RPC_URL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    ):
        super().__init__(rpc_url, request_timeout, receipt_timeout)

    def get_accounts(self) -> List[str]:
        with transport_errors(self.endpoint):
            node_accounts = list(self.web3.eth.accounts)
        local = super().get_accounts()
        return local + [a for a in node_accounts if a not in local]

    def get_default_account(self) -> Optional[str]:
        account = super().get_default_account()
        if account is None:
            accounts = self.get_accounts()
            if accounts:
                account = accounts[0]
                self.web3.eth.default_account = account
        return account


class ConnectionRegistry:
    """
    Connections keyed by chain id.

    Populated once at startup, then only read.

    Example:
        >>> registry = ConnectionRegistry.from_settings()
        >>> connection = registry.get(31337)
    """

    def __init__(self):
        self._connections: Dict[int, Connection] = {}
        self._lock = threading.Lock()

    def register(self, chain_id: int, connection: Connection, verify: bool = True) -> None:
        """
        Add the connection for a chain.

        Args:
            chain_id: Configured chain id
            connection: Connection to the chain's node
            verify: Check that the node reports the same chain id

        Raises:
            ConfigurationError: If the chain is already registered or the
                node serves a different chain
        """
        if verify:
            actual = connection.get_chain_id()
            if actual != chain_id:
                raise ConfigurationError(
                    f"RPC endpoint for chain {chain_id} serves chain {actual}",
                    {"expected": chain_id, "actual": actual}
                )

        with self._lock:
            if chain_id in self._connections:
                raise ConfigurationError(f"Connection already registered for chain {chain_id}")
            self._connections[chain_id] = connection

        logger.info(f"Registered connection for chain {chain_id}")

    def get(self, chain_id: int) -> Connection:
        """
        Raises:
            ChainNotConfiguredError: If no connection exists for the chain
        """
        connection = self._connections.get(chain_id)
        if connection is None:
            raise ChainNotConfiguredError(
                f"Connection not initialized for chain {chain_id}",
                chain_id=chain_id
            )
        return connection

    def chain_ids(self) -> List[int]:
        return sorted(self._connections)

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._connections

    @classmethod
    def from_settings(
        cls,
        settings: Optional[PredictionMarketsSettings] = None,
        verify: bool = True
    ) -> "ConnectionRegistry":
        """
        Build connections for every chain with an RPC URL.

        The configured wallet key, if any, is added to each connection.
        """
        settings = settings or get_settings()
        registry = cls()

        for chain in get_chains(settings):
            connection = HttpConnection(
                chain.rpc_url,
                request_timeout=settings.request_timeout,
                receipt_timeout=settings.receipt_timeout
            )
            if settings.wallet_private_key is not None:
                connection.add_account(settings.wallet_private_key.get_secret_value())
            registry.register(chain.chain_id, connection, verify=verify)

        return registry
