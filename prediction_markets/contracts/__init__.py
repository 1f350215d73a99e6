"""
Contract clients.

- Market: trading, views and positions for one market
- MarketFactory: market creation and discovery
- MarketAMM: pricing quotes from the AMM's pure functions
- CentralizedOracle: owner-set outcome oracle
"""

from .binding import ContractBinding
from .centralized_oracle import CentralizedOracle
from .deployable import Artifact, ArtifactStore, Deployable
from .errors import ContractErrorKind, decode_revert, translate_contract_error
from .market import Market
from .market_amm import MarketAMM
from .market_factory import IMPLEMENTATION_SLOT, MarketFactory
from .positions import reconstruct_positions

__all__ = [
    "ContractBinding",
    "CentralizedOracle",
    "Artifact",
    "ArtifactStore",
    "Deployable",
    "ContractErrorKind",
    "decode_revert",
    "translate_contract_error",
    "Market",
    "MarketAMM",
    "IMPLEMENTATION_SLOT",
    "MarketFactory",
    "reconstruct_positions",
]
