"""
ABIs for the prediction market contracts.

Market and MarketAMM match the deployed contracts. MarketFactory and
CentralizedOracle cover the functions, events and errors the client uses;
pass a compiled artifact's ABI to the client to use the full interface.
"""


def _uint(name: str) -> dict:
    return {"name": name, "type": "uint256", "internalType": "uint256"}


def _address(name: str, internal_type: str = "address") -> dict:
    return {"name": name, "type": "address", "internalType": internal_type}


def _error(name: str, *inputs: dict) -> dict:
    return {"type": "error", "name": name, "inputs": list(inputs)}


def _event(name: str, *inputs: dict) -> dict:
    return {"type": "event", "name": name, "inputs": list(inputs), "anonymous": False}


def _indexed(param: dict, indexed: bool = True) -> dict:
    return {**param, "indexed": indexed}


MARKET_POOL_STATE = {
    "name": "_marketParams",
    "type": "tuple",
    "internalType": "struct IMarketAMM.MarketPoolState",
    "components": [
        _uint("liquidity"),
        {"name": "outcomeShares", "type": "uint256[]", "internalType": "uint256[]"},
    ],
}

MARKET_INFO_COMPONENTS = [
    {"name": "question", "type": "string", "internalType": "string"},
    _uint("outcomeCount"),
    _uint("closeTime"),
    _uint("createTime"),
    _uint("closedAt"),
]

# Market ABI
MARKET_ABI = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "addLiquidity",
        "inputs": [_uint("_amount"), _uint("_deadline")],
        "outputs": [],
        "stateMutability": "payable"
    },
    {
        "type": "function",
        "name": "buyShares",
        "inputs": [
            _uint("_amount"),
            _uint("_outcomeIndex"),
            _uint("_minOutcomeShares"),
            _uint("_deadline"),
        ],
        "outputs": [],
        "stateMutability": "payable"
    },
    {"type": "function", "name": "claimFees", "inputs": [], "outputs": [], "stateMutability": "payable"},
    {"type": "function", "name": "claimLiquidity", "inputs": [], "outputs": [], "stateMutability": "payable"},
    {"type": "function", "name": "claimRewards", "inputs": [], "outputs": [], "stateMutability": "payable"},
    {"type": "function", "name": "closeMarket", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "creator",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "fees",
        "inputs": [],
        "outputs": [_uint("feeBPS"), _uint("poolWeight"), _uint("totalFeesCollected")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getClaimableFees",
        "inputs": [_address("_user")],
        "outputs": [_uint("amount")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getFeeBPS",
        "inputs": [],
        "outputs": [_uint("feeBPS")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getInfo",
        "inputs": [],
        "outputs": [{
            "name": "",
            "type": "tuple",
            "internalType": "struct IMarket.MarketInfo",
            "components": MARKET_INFO_COMPONENTS,
        }],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getOutcomePrice",
        "inputs": [_uint("_outcomeIndex")],
        "outputs": [_uint("price")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getOutcomes",
        "inputs": [],
        "outputs": [
            {"name": "names", "type": "string[]", "internalType": "string[]"},
            {"name": "totalShares", "type": "uint256[]", "internalType": "uint256[]"},
            {"name": "poolShares", "type": "uint256[]", "internalType": "uint256[]"},
        ],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getPoolData",
        "inputs": [],
        "outputs": [{
            "name": "",
            "type": "tuple",
            "internalType": "struct IMarket.MarketPoolData",
            "components": [
                _uint("balance"),
                _uint("liquidity"),
                _uint("totalAvailableShares"),
                {
                    "name": "outcomes",
                    "type": "tuple[]",
                    "internalType": "struct IMarket.Outcome[]",
                    "components": [
                        {"name": "name", "type": "string", "internalType": "string"},
                        {
                            "name": "shares",
                            "type": "tuple",
                            "internalType": "struct IMarket.Shares",
                            "components": [_uint("total"), _uint("available")],
                        },
                    ],
                },
            ],
        }],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getResolveDelay",
        "inputs": [],
        "outputs": [_uint("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getResolveOutcomeIndex",
        "inputs": [],
        "outputs": [_uint("outcomeIndex")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getUserClaimedFees",
        "inputs": [_address("_user")],
        "outputs": [_uint("claimedFees")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getUserLiquidityShares",
        "inputs": [_address("_user")],
        "outputs": [_uint("shares")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getUserOutcomeShares",
        "inputs": [_address("_user"), _uint("_outcomeIndex")],
        "outputs": [_uint("shares")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "info",
        "inputs": [],
        "outputs": MARKET_INFO_COMPONENTS,
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "initialize",
        "inputs": [
            {
                "name": "_marketInfo",
                "type": "tuple",
                "internalType": "struct IMarket.MarketInfoInput",
                "components": [
                    {"name": "question", "type": "string", "internalType": "string"},
                    {"name": "outcomeNames", "type": "string[]", "internalType": "string[]"},
                    _uint("closeTime"),
                    _uint("resolveDelay"),
                    _uint("feeBPS"),
                    _address("creator"),
                ],
            },
            _address("_oracle", "contract IOracle"),
            _address("_marketAMM", "contract IMarketAMM"),
            _uint("_initialLiquidity"),
        ],
        "outputs": [],
        "stateMutability": "payable"
    },
    {
        "type": "function",
        "name": "marketAMM",
        "inputs": [],
        "outputs": [_address("", "contract IMarketAMM")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "oracle",
        "inputs": [],
        "outputs": [_address("", "contract IOracle")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "poolData",
        "inputs": [],
        "outputs": [_uint("balance"), _uint("liquidity"), _uint("totalAvailableShares")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "removeLiquidity",
        "inputs": [_uint("_shares"), _uint("_deadline")],
        "outputs": [],
        "stateMutability": "payable"
    },
    {
        "type": "function",
        "name": "resolveDelay",
        "inputs": [],
        "outputs": [_uint("")],
        "stateMutability": "view"
    },
    {"type": "function", "name": "resolveMarket", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "sellShares",
        "inputs": [
            _uint("_receiveAmount"),
            _uint("_outcomeIndex"),
            _uint("_maxOutcomeShares"),
            _uint("_deadline"),
        ],
        "outputs": [],
        "stateMutability": "payable"
    },
    {
        "type": "function",
        "name": "state",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8", "internalType": "enum IMarket.MarketState"}],
        "stateMutability": "view"
    },
    # Events
    _event("FeesClaimed", _indexed(_address("_claimer")), _indexed(_uint("_amount"), False)),
    _event("Initialized", {"name": "version", "type": "uint64", "indexed": False, "internalType": "uint64"}),
    _event(
        "LiquidityAdded",
        _indexed(_address("_provider")),
        _indexed(_uint("_amount"), False),
        _indexed(_uint("_liquidityShares"), False),
        _indexed(_uint("_liquidity"), False),
    ),
    _event("LiquidityClaimed", _indexed(_address("_claimer")), _indexed(_uint("_amount"), False)),
    _event(
        "LiquidityRemoved",
        _indexed(_address("_provider")),
        _indexed(_uint("_shares"), False),
        _indexed(_uint("_amount"), False),
        _indexed(_uint("_liquidity"), False),
    ),
    _event(
        "MarketInitialized",
        {"name": "_question", "type": "string", "indexed": False, "internalType": "string"},
        _indexed(_uint("_outcomeCount"), False),
        _indexed(_uint("_closeTime"), False),
        _indexed(_address("_creator"), False),
        _indexed(_address("_oracle"), False),
        _indexed(_address("_marketAMM"), False),
        _indexed(_uint("_initialLiquidity"), False),
        _indexed(_uint("_resolveDelay"), False),
        _indexed(_uint("_feeBPS"), False),
    ),
    _event(
        "MarketStateUpdated",
        _indexed(_uint("_updatedAt"), False),
        {"name": "_state", "type": "uint8", "indexed": False, "internalType": "enum IMarket.MarketState"},
    ),
    _event("RewardsClaimed", _indexed(_address("_claimer")), _indexed(_uint("_amount"), False)),
    _event(
        "SharesBought",
        _indexed(_address("_buyer")),
        _indexed(_uint("_outcomeIndex")),
        _indexed(_uint("_amount"), False),
        _indexed(_uint("_fee"), False),
        _indexed(_uint("_shares"), False),
    ),
    _event(
        "SharesSold",
        _indexed(_address("_seller")),
        _indexed(_uint("_outcomeIndex")),
        _indexed(_uint("_amount"), False),
        _indexed(_uint("_fee"), False),
        _indexed(_uint("_shares"), False),
    ),
    # Errors
    _error("AmountMismatch", _uint("expected"), _uint("actual")),
    _error("DeadlinePassed"),
    _error("InsufficientShares"),
    _error("InvalidCloseTime"),
    _error("InvalidFeeBPS"),
    _error("InvalidInitialization"),
    _error("InvalidMarketState"),
    _error("InvalidResolveDelay", _uint("MIN_RESOLVE_DELAY"), _uint("MAX_RESOLVE_DELAY")),
    _error("MarketCloseTimeNotPassed"),
    _error("MarketClosed"),
    _error("MarketResolveDelayNotPassed"),
    _error("MaxSharesNotMet"),
    _error("MinimumSharesNotMet"),
    _error("NoLiquidityToClaim"),
    _error("NoRewardsToClaim"),
    _error("NotInitializing"),
    _error("OnlyBinaryMarketSupported"),
    _error("OracleNotResolved"),
    _error("TransferFailed"),
    _error("ZeroAddress"),
]

# MarketAMM ABI - pure pricing functions
MARKET_AMM_ABI = [
    {
        "type": "function",
        "name": "getAddLiquidityData",
        "inputs": [_uint("_amount"), MARKET_POOL_STATE],
        "outputs": [
            _uint("liquidityShares"),
            {"name": "outcomeShareToReturn", "type": "uint256[]", "internalType": "uint256[]"},
            {"name": "newOutcomeShares", "type": "uint256[]", "internalType": "uint256[]"},
        ],
        "stateMutability": "pure"
    },
    {
        "type": "function",
        "name": "getBuyOutcomeData",
        "inputs": [_uint("_amount"), _uint("_outcomeIndex"), MARKET_POOL_STATE],
        "outputs": [_uint("shares")],
        "stateMutability": "pure"
    },
    {
        "type": "function",
        "name": "getClaimLiquidityData",
        "inputs": [_uint("_liquidityShares"), _uint("_resolvedOutcomeShares"), _uint("_liquidity")],
        "outputs": [_uint("amount")],
        "stateMutability": "pure"
    },
    {
        "type": "function",
        "name": "getOutcomePrice",
        "inputs": [_uint("_outcomeIndex"), _uint("_totalAvailableShares"), MARKET_POOL_STATE],
        "outputs": [_uint("price")],
        "stateMutability": "pure"
    },
    {
        "type": "function",
        "name": "getRemoveLiquidityData",
        "inputs": [_uint("_shares"), MARKET_POOL_STATE],
        "outputs": [
            _uint("liquidityValue"),
            {"name": "outcomeSharesToReturn", "type": "uint256[]", "internalType": "uint256[]"},
            {"name": "newOutcomeShares", "type": "uint256[]", "internalType": "uint256[]"},
        ],
        "stateMutability": "pure"
    },
    {
        "type": "function",
        "name": "getSellOutcomeData",
        "inputs": [_uint("_amount"), _uint("_outcomeIndex"), MARKET_POOL_STATE],
        "outputs": [_uint("shares")],
        "stateMutability": "pure"
    },
    _error("InsufficientLiquidity"),
]

# MarketFactory ABI (UUPS upgradeable, Ownable)
MARKET_FACTORY_ABI = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "createMarket",
        "inputs": [
            {"name": "_question", "type": "string", "internalType": "string"},
            {"name": "_outcomeNames", "type": "string[]", "internalType": "string[]"},
            _uint("_closeTime"),
            _address("_oracle"),
            _uint("_initialLiquidity"),
            _uint("_resolveDelay"),
            _uint("_feeBPS"),
        ],
        "outputs": [_address("")],
        "stateMutability": "payable"
    },
    {
        "type": "function",
        "name": "getMarket",
        "inputs": [_uint("_index")],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "getMarketCount",
        "inputs": [],
        "outputs": [_uint("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "initialize",
        "inputs": [
            _address("_owner"),
            _address("_marketImplementation"),
            _address("_marketAMMImplementation"),
            _address("_oracleImplementation"),
        ],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    {
        "type": "function",
        "name": "marketAMMImplementation",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "marketImplementation",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "oracleImplementation",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "owner",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "setMarketAMMImplementation",
        "inputs": [_address("_implementation")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    {
        "type": "function",
        "name": "setMarketImplementation",
        "inputs": [_address("_implementation")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    {
        "type": "function",
        "name": "setOracleImplementation",
        "inputs": [_address("_implementation")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    {
        "type": "function",
        "name": "transferOwnership",
        "inputs": [_address("newOwner")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    _event(
        "MarketCreated",
        _indexed(_address("creator")),
        _indexed(_address("marketAddress")),
    ),
    _event(
        "OwnershipTransferred",
        _indexed(_address("previousOwner")),
        _indexed(_address("newOwner")),
    ),
    _event("Upgraded", _indexed(_address("implementation"))),
    _error("AddressEmptyCode", _address("target")),
    _error("ERC1967InvalidImplementation", _address("implementation")),
    _error("ERC1967NonPayable"),
    _error("FailedCall"),
    _error("FailedDeployment"),
    _error("IndexOutOfBounds"),
    _error("InsufficientBalance", _uint("balance"), _uint("needed")),
    _error("InvalidInitialization"),
    _error("NotInitializing"),
    _error("OwnableInvalidOwner", _address("owner")),
    _error("OwnableUnauthorizedAccount", _address("account")),
    _error("UUPSUnauthorizedCallContext"),
    _error("UUPSUnsupportedProxiableUUID", {"name": "slot", "type": "bytes32", "internalType": "bytes32"}),
    _error("ZeroAddress"),
]

# CentralizedOracle ABI (owner-set outcome)
CENTRALIZED_ORACLE_ABI = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "getOutcome",
        "inputs": [],
        "outputs": [_uint("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "initialize",
        "inputs": [_address("_owner")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    {
        "type": "function",
        "name": "isResolved",
        "inputs": [],
        "outputs": [{"name": "", "type": "bool", "internalType": "bool"}],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "owner",
        "inputs": [],
        "outputs": [_address("")],
        "stateMutability": "view"
    },
    {
        "type": "function",
        "name": "setOutcome",
        "inputs": [_uint("_outcomeIndex")],
        "outputs": [],
        "stateMutability": "nonpayable"
    },
    _event("OutcomeSet", _indexed(_uint("_outcomeIndex"), False)),
    _error("OutcomeNotResolvedYet"),
    _error("OwnableUnauthorizedAccount", _address("account")),
]

# ERC1967Proxy - constructor only
ERC1967_PROXY_ABI = [
    {
        "type": "constructor",
        "inputs": [
            _address("implementation"),
            {"name": "_data", "type": "bytes", "internalType": "bytes"},
        ],
        "stateMutability": "payable"
    },
    _event("Upgraded", _indexed(_address("implementation"))),
    _error("AddressEmptyCode", _address("target")),
    _error("ERC1967InvalidImplementation", _address("implementation")),
    _error("ERC1967NonPayable"),
    _error("FailedCall"),
]

# Merge order decides wording for errors declared by several contracts
ERROR_ABIS = [
    MARKET_ABI,
    MARKET_AMM_ABI,
    MARKET_FACTORY_ABI,
    CENTRALIZED_ORACLE_ABI,
]
