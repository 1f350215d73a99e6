"""
MarketFactory client.

The factory is an upgradeable (UUPS, ERC1967) contract that clones the
Market implementation for every new market and records the markets it
created.
"""

import logging
from typing import List, Optional

from eth_abi import decode
from eth_utils import to_checksum_address
from web3.types import TxReceipt

from ..connection import Connection, transport_errors
from ..models import CreateMarketArgs, MarketFactoryDeployOptions
from ..utils.validators import validate_address, validate_create_market_args
from .abi import MARKET_FACTORY_ABI
from .binding import DEFAULT_LOG_CHUNK_SIZE, ContractBinding
from .centralized_oracle import CentralizedOracle
from .deployable import ArtifactStore, Deployable
from .market import Market
from .market_amm import MarketAMM

logger = logging.getLogger(__name__)

# bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class MarketFactory(Deployable):
    """
    Client for a MarketFactory proxy.

    Example:
        >>> factory = MarketFactory.at(connection, "0x...", start_block=100)
        >>> market = factory.create_market(CreateMarketArgs(
        ...     question="Will it rain tomorrow?",
        ...     outcome_names=["Yes", "No"],
        ...     close_time=int(time.time()) + 86400,
        ...     initial_liquidity=10**18,
        ...     resolve_delay_seconds=3600,
        ...     fee_bps=100,
        ... ))
    """

    ARTIFACT_NAME = "MarketFactory"
    ABI = MARKET_FACTORY_ABI

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @classmethod
    def at(
        cls,
        connection: Connection,
        address: str,
        start_block: Optional[int] = None,
        default_sender: Optional[str] = None,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE
    ) -> "MarketFactory":
        return cls(ContractBinding(
            connection,
            address,
            cls.ABI,
            start_block=start_block,
            default_sender=default_sender,
            log_chunk_size=log_chunk_size
        ))

    @classmethod
    def deploy(
        cls,
        connection: Connection,
        options: MarketFactoryDeployOptions,
        artifacts: ArtifactStore,
        sender: Optional[str] = None
    ) -> "MarketFactory":
        """
        Deploy a factory behind an ERC1967 proxy.

        Implementations missing from the options are deployed first. The
        returned factory scans events from the block read before deployment.
        """
        start_block = connection.get_block_number()

        market_impl = (
            options.market_implementation
            or Market.deploy_implementation(connection, artifacts, sender)
        )
        amm_impl = (
            options.market_amm_implementation
            or MarketAMM.deploy_implementation(connection, artifacts, sender)
        )
        oracle_impl = (
            options.default_oracle_implementation
            or CentralizedOracle.deploy_implementation(connection, artifacts, sender)
        )

        implementation = cls.deploy_implementation(connection, artifacts, sender)
        init_args = [
            validate_address(options.owner, "owner"),
            validate_address(market_impl, "market implementation"),
            validate_address(amm_impl, "market AMM implementation"),
            validate_address(oracle_impl, "oracle implementation"),
        ]
        address = cls.deploy_proxy(connection, implementation, init_args, artifacts, sender)

        logger.info(f"MarketFactory deployed at {address} (implementation {implementation})")
        return cls.at(connection, address, start_block=start_block, default_sender=sender)

    @property
    def address(self) -> str:
        return self.binding.address

    @property
    def start_block(self) -> Optional[int]:
        return self.binding.start_block

    def set_start_block(self, block_number: Optional[int]) -> "MarketFactory":
        self.binding.set_start_block(block_number)
        return self

    def set_default_sender(self, sender: Optional[str]) -> "MarketFactory":
        self.binding.set_default_sender(sender)
        return self

    def _market(self, address: str, start_block: Optional[int] = None,
                sender: Optional[str] = None) -> Market:
        return Market.at(
            self.binding.connection,
            address,
            start_block=start_block,
            default_sender=sender or self.binding.default_sender,
            log_chunk_size=self.binding.log_chunk_size
        )

    def create_market(self, args: CreateMarketArgs, sender: Optional[str] = None) -> Market:
        """
        Create a binary market, funding it with `initial_liquidity` wei.

        Arguments are validated before anything is sent.

        Returns:
            The new Market, scanning events from its creation block

        Raises:
            ValidationError: If an argument is out of range
            DomainRevertError: On contract revert
            MissingEventError: If MarketCreated was not emitted
        """
        wire = validate_create_market_args(
            args.question,
            args.outcome_names,
            args.close_time,
            args.initial_liquidity,
            args.resolve_delay_seconds,
            args.fee_bps
        )
        oracle = validate_address(args.oracle, "oracle") if args.oracle else ZERO_ADDRESS

        receipt = self.binding.send(
            "createMarket",
            args.question,
            list(args.outcome_names),
            wire["close_time"],
            oracle,
            wire["initial_liquidity"],
            wire["resolve_delay"],
            wire["fee_bps"],
            value=wire["initial_liquidity"],
            sender=sender
        )
        event = self.binding.extract_event(receipt, "MarketCreated")
        market_address = event["args"]["marketAddress"]

        logger.info(f"Market created at {market_address} (block {event['blockNumber']})")
        return self._market(market_address, start_block=event["blockNumber"], sender=sender)

    def get_market_count(self) -> int:
        return self.binding.call("getMarketCount")

    def get_market(self, index: int) -> Market:
        # A market is never older than its factory
        return self._market(
            self.binding.call("getMarket", index),
            start_block=self.binding.start_block
        )

    def get_markets(self) -> List[Market]:
        """All markets in creation order."""
        return [self.get_market(index) for index in range(self.get_market_count())]

    def get_user_created_markets(self, user: str) -> List[Market]:
        """Markets created by `user`, found through MarketCreated events."""
        logs = self.binding.get_logs(
            "MarketCreated",
            argument_filters={"creator": validate_address(user, "user")}
        )
        return [
            self._market(log["args"]["marketAddress"], start_block=log["blockNumber"])
            for log in logs
        ]

    def get_implementation(self) -> str:
        """Implementation address stored in the proxy's ERC1967 slot."""
        with transport_errors(self.binding.connection.endpoint):
            raw = self.binding.web3.eth.get_storage_at(self.address, IMPLEMENTATION_SLOT)
        (implementation,) = decode(["address"], bytes(raw).rjust(32, b"\x00"))
        return to_checksum_address(implementation)

    def get_owner(self) -> str:
        return self.binding.call("owner")

    def get_market_implementation(self) -> str:
        return self.binding.call("marketImplementation")

    def get_market_amm_implementation(self) -> str:
        return self.binding.call("marketAMMImplementation")

    def get_oracle_implementation(self) -> str:
        return self.binding.call("oracleImplementation")

    # ========== Owner operations ==========

    def transfer_ownership(self, new_owner: str, sender: Optional[str] = None) -> TxReceipt:
        return self.binding.send(
            "transferOwnership", validate_address(new_owner, "new owner"), sender=sender
        )

    def set_market_implementation(self, implementation: str,
                                  sender: Optional[str] = None) -> TxReceipt:
        return self.binding.send(
            "setMarketImplementation", validate_address(implementation, "implementation"),
            sender=sender
        )

    def set_market_amm_implementation(self, implementation: str,
                                      sender: Optional[str] = None) -> TxReceipt:
        return self.binding.send(
            "setMarketAMMImplementation", validate_address(implementation, "implementation"),
            sender=sender
        )

    def set_oracle_implementation(self, implementation: str,
                                  sender: Optional[str] = None) -> TxReceipt:
        return self.binding.send(
            "setOracleImplementation", validate_address(implementation, "implementation"),
            sender=sender
        )

    def __repr__(self) -> str:
        return f"MarketFactory(address={self.address})"
