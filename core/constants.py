"""
Core Module - Constants.

============================================================
RESPONSIBILITY
============================================================
Chain-level constants shared by the catalog, the handlers
and the storage layer.

- Single source of truth for sentinel addresses
- Protocol asset-type tags and item types
- Sync tuning defaults

============================================================
"""

# ============================================================
# ADDRESSES
# ============================================================

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Canonical native-token currency used in every fill record
NATIVE_CURRENCY = ZERO_ADDRESS

# Sentinel some exchanges (Element, ZeroEx v4) use for the native token
ETH_PLACEHOLDER_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

# ============================================================
# SYNC DEFAULTS
# ============================================================

PREWARM_MAX_BLOCKS = 32
PREWARM_CONCURRENCY = 32
MAX_VALIDATE_CALLS = 100

DEFAULT_REORG_CHECK_FREQUENCY_MINUTES = (1, 5, 10, 30, 60)

# Immediate re-checks for heights already holding more than one hash
DUPLICATE_BLOCK_RECHECK_DELAYS_SECONDS = (10, 30)

# Batch index of events that do not bundle several entries
DEFAULT_BATCH_INDEX = 1

# ============================================================
# SEAPORT ITEM TYPES
# ============================================================

SEAPORT_ITEM_NATIVE = 0
SEAPORT_ITEM_ERC20 = 1
SEAPORT_ITEM_ERC721 = 2
SEAPORT_ITEM_ERC1155 = 3
SEAPORT_ITEM_ERC721_WITH_CRITERIA = 4
SEAPORT_ITEM_ERC1155_WITH_CRITERIA = 5

# ============================================================
# RARIBLE / UNIVERSE ASSET CLASSES (bytes4 tags)
# ============================================================

ASSET_CLASS_ETH = "0xaaaebeba"
ASSET_CLASS_ERC20 = "0x8ae85d84"
ASSET_CLASS_ERC721 = "0x73ad2146"
ASSET_CLASS_ERC721_LAZY = "0xd8f960c1"
ASSET_CLASS_ERC1155 = "0x973bb640"
ASSET_CLASS_ERC1155_LAZY = "0x1cdfaa40"

NFT_ASSET_CLASSES = (
    ASSET_CLASS_ERC721,
    ASSET_CLASS_ERC721_LAZY,
    ASSET_CLASS_ERC1155,
    ASSET_CLASS_ERC1155_LAZY,
)
CURRENCY_ASSET_CLASSES = (ASSET_CLASS_ETH, ASSET_CLASS_ERC20)
SUPPORTED_ASSET_CLASSES = NFT_ASSET_CLASSES + CURRENCY_ASSET_CLASSES
