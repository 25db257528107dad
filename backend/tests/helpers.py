"""Transaction payload builders shared by the test modules."""

WALLET = "GJRYBLa6XqfvQGjjHv61bXRDUZxFCUMwYxSzZa8EBP4S"
OTHER_WALLET = "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
RELAYER = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
POOL = "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2"

NATIVE_SOL = "So11111111111111111111111111111111111111111"
WSOL = "So11111111111111111111111111111111111111112"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
BONK = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WIF = "EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm"
JUP = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"
POPCAT = "7GCihgDB8fe6KNjn2MYtkzZcRjQy3t9GHdC8uHYmW2hr"
RAY = "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R"


def balance_change(mint, change, decimals=9, owner=WALLET, pre=None, post=None):
    """Balance row; pre/post default to a funded account that stays open."""
    if pre is None:
        pre = abs(change) + 10 ** 9
    if post is None:
        post = pre + change
    return {
        "mint": mint,
        "owner": owner,
        "decimals": decimals,
        "change_amount": change,
        "pre_balance": pre,
        "post_balance": post,
    }


def leg(mint, amount_raw, decimals=None):
    payload = {"token_address": mint, "amount_raw": amount_raw}
    if decimals is not None:
        payload["decimals"] = decimals
    return payload


def swap_action(in_leg=None, out_leg=None, swapper=WALLET, **info):
    payload = dict(info)
    if swapper is not None:
        payload["swapper"] = swapper
    swapped = {}
    if in_leg is not None:
        swapped["in"] = in_leg
    if out_leg is not None:
        swapped["out"] = out_leg
    if swapped:
        payload["tokens_swapped"] = swapped
    return {"type": "SWAP", "info": payload}


def transfer_action(action_type="TOKEN_TRANSFER", sender=OTHER_WALLET, receiver=WALLET, **info):
    return {"type": action_type, "info": {"sender": sender, "receiver": receiver, **info}}


def make_tx(changes, actions=None, signature="sig-1", fee=5000, fee_payer=WALLET, signers=None, **extra):
    payload = {
        "signature": signature,
        "status": "Success",
        "fee": fee,
        "fee_payer": fee_payer,
        "signers": signers if signers is not None else [fee_payer],
        "token_balance_changes": changes,
        "actions": actions if actions is not None else [],
    }
    payload.update(extra)
    return payload


def scenario_a():
    """USDC for a 6-decimal token, both legs in the fee payer's balances."""
    return make_tx(
        [
            balance_change(USDC, -2_000_000_000, decimals=6),
            balance_change(WIF, 13_229_297_363_172, decimals=6),
        ],
        actions=[swap_action(leg(USDC, "2000000000"), leg(WIF, "13229297363172"))],
        signature="scenario-a",
        protocol={"name": "Jupiter", "address": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"},
    )


def scenario_b():
    """Token routed through SOL into another token; only the outflow reaches the wallet."""
    route = swap_action(
        leg(POPCAT, "23996576374000"),
        leg(WSOL, "1234567890"),
        swaps=[
            {"in": leg(POPCAT, "23996576374000"), "out": leg(WSOL, "1234567890")},
            {"in": leg(WSOL, "1234567890"), "out": leg(WIF, "987654321", decimals=6)},
        ],
    )
    return make_tx(
        [balance_change(POPCAT, -23_996_576_374_000, decimals=9)],
        actions=[route],
        signature="scenario-b",
    )


def scenario_c():
    """Unmatched inflow from a token transfer."""
    return make_tx(
        [balance_change(BONK, 500_000_000, decimals=5)],
        actions=[transfer_action("TOKEN_TRANSFER", sender=OTHER_WALLET, receiver=WALLET, amount=5000)],
        signature="scenario-c",
    )


def scenario_d():
    """Native SOL outflow, empty wSOL row and a freshly opened token account."""
    return make_tx(
        [
            balance_change(NATIVE_SOL, -3_740_000_000, decimals=9, pre=10_000_000_000),
            balance_change(WSOL, 0, decimals=9, pre=0, post=0),
            balance_change(JUP, 50_000_000_000, decimals=9, pre=0),
        ],
        actions=[swap_action()],
        signature="scenario-d",
    )
