"""
CentralizedOracle client.

An owner-operated oracle: the owner sets the winning outcome index and
markets read it when they resolve.
"""

import logging
from typing import Optional

from web3.types import TxReceipt

from ..connection import Connection
from ..models import OracleDeployOptions
from ..utils.numeric import to_uint
from ..utils.validators import validate_address
from .abi import CENTRALIZED_ORACLE_ABI
from .binding import ContractBinding
from .deployable import ArtifactStore, Deployable

logger = logging.getLogger(__name__)


class CentralizedOracle(Deployable):
    """Client for a CentralizedOracle proxy."""

    ARTIFACT_NAME = "CentralizedOracle"
    ABI = CENTRALIZED_ORACLE_ABI

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @classmethod
    def at(
        cls,
        connection: Connection,
        address: str,
        start_block: Optional[int] = None,
        default_sender: Optional[str] = None
    ) -> "CentralizedOracle":
        return cls(ContractBinding(
            connection, address, cls.ABI,
            start_block=start_block,
            default_sender=default_sender
        ))

    @classmethod
    def deploy(
        cls,
        connection: Connection,
        options: OracleDeployOptions,
        artifacts: ArtifactStore,
        sender: Optional[str] = None
    ) -> "CentralizedOracle":
        """Deploy an implementation and a proxy initialized with `options.owner`."""
        start_block = connection.get_block_number()
        implementation = cls.deploy_implementation(connection, artifacts, sender)
        address = cls.deploy_proxy(
            connection,
            implementation,
            [validate_address(options.owner, "owner")],
            artifacts,
            sender
        )
        logger.info(f"CentralizedOracle deployed at {address}")
        return cls.at(connection, address, start_block=start_block, default_sender=sender)

    @property
    def address(self) -> str:
        return self.binding.address

    def set_outcome(self, outcome_index: int, sender: Optional[str] = None) -> TxReceipt:
        """Record the winning outcome. Owner only."""
        return self.binding.send("setOutcome", to_uint(outcome_index, "outcome index"), sender=sender)

    def get_outcome(self) -> int:
        """
        Raises:
            DomainRevertError: OutcomeNotResolvedYet before set_outcome
        """
        return self.binding.call("getOutcome")

    def is_resolved(self) -> bool:
        return self.binding.call("isResolved")

    def get_owner(self) -> str:
        return self.binding.call("owner")

    def __repr__(self) -> str:
        return f"CentralizedOracle(address={self.address})"
