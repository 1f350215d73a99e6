"""
Contract deployment from compiled artifacts.

Implementations are deployed from their compiled bytecode; upgradeable
contracts are then fronted by an ERC1967 proxy whose constructor runs the
implementation's initialize function.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import orjson
from web3 import Web3

from ..config import PredictionMarketsSettings, get_settings
from ..connection import Connection
from ..exceptions import ArtifactError, ConfigurationError, DeploymentError
from .abi import ERC1967_PROXY_ABI
from .binding import contract_errors, wait_for_receipt

logger = logging.getLogger(__name__)

PROXY_ARTIFACT = "ERC1967Proxy"


@dataclass(frozen=True)
class Artifact:
    """Compiled contract: ABI plus creation bytecode."""
    name: str
    abi: List[Dict[str, Any]]
    bytecode: str


class ArtifactStore:
    """
    Reads compiled contract artifacts from a build directory.

    Supports Foundry layout (``<dir>/<Name>.sol/<Name>.json`` with
    ``bytecode.object``) and flat Hardhat-style files (``<dir>/<Name>.json``
    with a hex ``bytecode`` string).
    """

    def __init__(self, artifacts_dir: Union[str, Path]):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, Artifact] = {}

    @classmethod
    def from_settings(cls, settings: Optional[PredictionMarketsSettings] = None) -> "ArtifactStore":
        """Store over the configured artifacts_dir."""
        return cls((settings or get_settings()).artifacts_dir)

    def _candidates(self, name: str) -> List[Path]:
        return [
            self.artifacts_dir / f"{name}.sol" / f"{name}.json",
            self.artifacts_dir / f"{name}.json",
        ]

    def load(self, name: str) -> Artifact:
        """
        Load an artifact by contract name.

        Raises:
            ArtifactError: If no artifact file exists or it lacks ABI/bytecode
        """
        if name in self._cache:
            return self._cache[name]

        path = next((p for p in self._candidates(name) if p.is_file()), None)
        if path is None:
            raise ArtifactError(f"Artifact for {name} not found in {self.artifacts_dir}", name)

        try:
            data = orjson.loads(path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise ArtifactError(f"Artifact {path} is not valid JSON: {e}", name) from e

        abi = data.get("abi")
        bytecode = data.get("bytecode")
        if isinstance(bytecode, dict):
            bytecode = bytecode.get("object")

        if not isinstance(abi, list) or not bytecode or bytecode == "0x":
            raise ArtifactError(f"Artifact {path} has no ABI or bytecode", name)

        if not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode

        artifact = Artifact(name=name, abi=abi, bytecode=bytecode)
        self._cache[name] = artifact
        return artifact


def _deployer(connection: Connection, sender: Optional[str]) -> str:
    if sender:
        return Web3.to_checksum_address(sender)
    account = connection.get_default_account()
    if account is None:
        raise ConfigurationError("No sender account configured for deployment")
    return account


def deploy_contract(
    connection: Connection,
    artifact: Artifact,
    constructor_args: Sequence[Any] = (),
    sender: Optional[str] = None,
    abi: Optional[List[Dict[str, Any]]] = None
) -> str:
    """
    Deploy a contract and return its address.

    Args:
        connection: Chain connection
        artifact: Compiled contract
        constructor_args: Constructor arguments in wire format
        sender: Deploying account (defaults to the connection's default account)
        abi: ABI for the constructor, if it differs from the artifact's

    Raises:
        DeploymentError: If the receipt has no contract address
    """
    deployer = _deployer(connection, sender)
    factory = connection.web3.eth.contract(abi=abi or artifact.abi, bytecode=artifact.bytecode)

    with contract_errors(connection.endpoint):
        tx_hash = factory.constructor(*constructor_args).transact({"from": deployer})

    receipt = wait_for_receipt(connection, tx_hash, f"Deploy {artifact.name}")
    address = receipt.get("contractAddress")
    if not address:
        raise DeploymentError(
            f"{artifact.name} deployment returned no contract address",
            {"tx_hash": receipt["transactionHash"].to_0x_hex()}
        )

    address = Web3.to_checksum_address(address)
    logger.info(f"Deployed {artifact.name} at {address}")
    return address


def encode_initializer(web3: Web3, abi: List[Dict[str, Any]], init_args: Sequence[Any]) -> str:
    """ABI-encoded initialize(...) call data for a proxy constructor."""
    return web3.eth.contract(abi=abi).encode_abi("initialize", args=list(init_args))


class Deployable:
    """
    Mixin for clients whose contract can be deployed.

    Subclasses set ARTIFACT_NAME and ABI.
    """
    ARTIFACT_NAME: str = ""
    ABI: List[Dict[str, Any]] = []

    @classmethod
    def deploy_implementation(
        cls,
        connection: Connection,
        artifacts: ArtifactStore,
        sender: Optional[str] = None
    ) -> str:
        """Deploy the bare implementation contract and return its address."""
        return deploy_contract(connection, artifacts.load(cls.ARTIFACT_NAME), sender=sender)

    @classmethod
    def deploy_proxy(
        cls,
        connection: Connection,
        implementation: str,
        init_args: Sequence[Any],
        artifacts: ArtifactStore,
        sender: Optional[str] = None
    ) -> str:
        """
        Deploy an ERC1967 proxy to an implementation, initialized in the
        same transaction.

        Returns:
            Proxy address
        """
        init_data = encode_initializer(connection.web3, cls.ABI, init_args)
        proxy = artifacts.load(PROXY_ARTIFACT)
        return deploy_contract(
            connection,
            proxy,
            constructor_args=(Web3.to_checksum_address(implementation), init_data),
            sender=sender,
            abi=ERC1967_PROXY_ABI
        )
