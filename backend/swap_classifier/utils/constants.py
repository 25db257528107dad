"""Well-known Solana mints and action tags."""
from typing import Any, Dict, Mapping

# Native SOL has no real mint; indexers report it under the system "mint"
# below, while wrapped SOL uses the SPL token mint.
NATIVE_SOL_MINT = "So11111111111111111111111111111111111111111"
WSOL_MINT = "So11111111111111111111111111111111111111112"

# Both SOL representations aggregate under this mint.
CANONICAL_SOL_MINT = WSOL_MINT
SOL_MINTS = frozenset({NATIVE_SOL_MINT, WSOL_MINT})
SOL_DECIMALS = 9
LAMPORTS_PER_SOL = 10 ** SOL_DECIMALS

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

# Settlement assets used when no core list is configured
DEFAULT_CORE_TOKENS = (
    WSOL_MINT,
    USDC_MINT,
    USDT_MINT,
    "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So",   # mSOL
    "7dHbWXmci3dT8UFYWYZweBLXgycu7Y3iL6trKn1Y7ARj",  # stSOL
    "J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn",  # jitoSOL
    "bSo13r4TkiE4KumL71LsHTPpL2euBYLFx6h9HP3piy1",   # bSOL
    "jupSoLaHXQiZZTSfEWMTRRgpnyFm8f6sZdosWBjx93v",   # jupSOL
    "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo",  # PYUSD
    "USDSwr9ApdHk5bvJKMjzff41FfuX8bSxdKcR81vTwcA",   # USDS
)

KNOWN_SYMBOLS = {
    NATIVE_SOL_MINT: "SOL",
    WSOL_MINT: "SOL",
    USDC_MINT: "USDC",
    USDT_MINT: "USDT",
}

# Action type tags
SWAP_ACTION_TYPES = frozenset({"SWAP", "JUPITER_SWAP", "RAYDIUM_SWAP", "ORCA_SWAP"})
TRANSFER_ACTION_TYPES = frozenset({"TOKEN_TRANSFER", "SOL_TRANSFER", "TRANSFER"})
SOL_TRANSFER_ACTION = "SOL_TRANSFER"

# Bookkeeping actions that say nothing about economic intent
PROTOCOL_ACTION_TYPES = frozenset({
    "CHECKANDSETSEQUENCENUMBER",
    "COMPUTE_BUDGET",
    "SET_COMPUTE_UNIT_LIMIT",
    "SET_COMPUTE_UNIT_PRICE",
    "CREATE_ACCOUNT",
    "INITIALIZE_ACCOUNT",
    "CLOSE_ACCOUNT",
})

# Top-level transaction types that are never swaps
NON_SWAP_TRANSACTION_TYPES = frozenset({
    "CHECKANDSETSEQUENCENUMBER",
    "COMPUTE_BUDGET",
    "SET_COMPUTE_UNIT_LIMIT",
    "SET_COMPUTE_UNIT_PRICE",
    "CREATE_ACCOUNT",
    "INITIALIZE_ACCOUNT",
    "CLOSE_ACCOUNT",
    "NFT_MINT",
    "NFT_BURN",
    "NFT_TRANSFER",
    "STAKE",
    "UNSTAKE",
    "VOTE",
    "WITHDRAW",
    "DEPOSIT",
    "CLAIM",
    "APPROVE",
    "REVOKE",
})

SUCCESS_STATUS = "Success"
UNKNOWN_PROTOCOL = "UNKNOWN"


def canonical_mint(mint: str) -> str:
    """Map native SOL and wrapped SOL onto one mint."""
    return CANONICAL_SOL_MINT if mint in SOL_MINTS else mint


def is_sol_mint(mint: str) -> bool:
    return mint in SOL_MINTS


def canonical_prices(prices: Mapping[str, Any]) -> Dict[str, Any]:
    """Price map keyed by canonical mint; an explicit wSOL price wins over native SOL."""
    canonical: Dict[str, Any] = {}
    for mint, price in prices.items():
        key = canonical_mint(mint)
        if key not in canonical or mint == key:
            canonical[key] = price
    return canonical


def symbol_for_mint(mint: str) -> str:
    """Known symbol, or a shortened mint address."""
    known = KNOWN_SYMBOLS.get(mint)
    if known:
        return known
    return f"{mint[:4]}...{mint[-4:]}"
