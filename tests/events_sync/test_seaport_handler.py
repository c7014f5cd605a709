"""
Tests for the Seaport handler.

============================================================
COVERS
============================================================
- Listing / bid fills and their triggers
- Matched-order de-duplication
- Native price guard
- Maker approval re-checks
- Order reconstruction from validation events
- Per-event failure isolation

============================================================
"""

from unittest.mock import AsyncMock

import pytest
from eth_abi import encode

from events_sync.catalog import erc20, seaport
from events_sync.handlers.seaport import VALIDATE, SeaportHandler
from events_sync.seaport_hashing import OrderParameters, compute_order_hash
from onchain_adapters.exceptions import FetchError
from onchain_adapters.models import CallFrame

from tests.factories import (
    ERC20_TOKEN,
    MAKER,
    NFT_CONTRACT,
    ORDER_HASH,
    OTHER_ORDER_HASH,
    RELAYER,
    TAKER,
    TX_HASH,
    ZERO_ADDRESS,
)


ETH = 10 ** 18
FEE_RECIPIENT = "0x" + "fe" * 20
ITEM_NATIVE, ITEM_ERC20, ITEM_ERC721 = 0, 1, 2


def fulfilled(order_hash=ORDER_HASH, offerer=MAKER, recipient=TAKER, offer=(), consideration=()):
    return {
        "orderHash": order_hash,
        "offerer": offerer,
        "zone": ZERO_ADDRESS,
        "recipient": recipient,
        "offer": list(offer),
        "consideration": list(consideration),
    }


def order_parameters(offerer=MAKER, salt=42):
    return (
        offerer,
        ZERO_ADDRESS,
        [(ITEM_ERC721, NFT_CONTRACT, 5, 1, 1)],
        [(ITEM_NATIVE, ZERO_ADDRESS, 0, ETH, ETH, offerer)],
        0,
        1,
        2 ** 32,
        b"\x00" * 32,
        salt,
        b"\x00" * 32,
        1,
    )


def order_hash_bytes(params, counter: int) -> bytes:
    return bytes.fromhex(compute_order_hash(OrderParameters.from_abi(params), counter)[2:])


@pytest.fixture
def handler(handler_context):
    return SeaportHandler(handler_context)


# ============================================================
# FILLS
# ============================================================

class TestSeaportFills:
    """Tests for OrderFulfilled handling."""

    @pytest.mark.asyncio
    async def test_listing_fill(self, handler, make_event):
        event = make_event(seaport.order_filled, fulfilled(
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1)],
            consideration=[
                (ITEM_NATIVE, ZERO_ADDRESS, 0, 9 * ETH // 10, MAKER),
                (ITEM_NATIVE, ZERO_ADDRESS, 0, ETH // 10, FEE_RECIPIENT),
            ],
        ))

        data = await handler.handle([event])

        assert len(data.fill_events) == 1
        fill = data.fill_events[0]
        assert fill.order_kind == "seaport"
        assert fill.order_id == "0x" + "01" * 32
        assert fill.order_side == "sell"
        assert fill.maker == MAKER
        assert fill.taker == TAKER
        assert fill.price == str(ETH)
        assert fill.currency == ZERO_ADDRESS
        assert fill.usd_price == "2000000000"
        assert fill.contract == NFT_CONTRACT
        assert fill.token_id == "5"
        assert fill.amount == "1"

        assert [info.context for info in data.fill_infos] == [f"{fill.order_id}-{TX_HASH}"]
        assert [trigger.context for trigger in data.order_infos] == [f"filled-{fill.order_id}-{TX_HASH}"]
        assert data.order_infos[0].kind == "sale"
        assert data.maker_infos == []

    @pytest.mark.asyncio
    async def test_bid_fill_with_erc20_payment_triggers_approval_recheck(self, handler, make_event, settings):
        weth = settings.weth
        payment = make_event(erc20.transfer, {"from": MAKER, "to": TAKER, "amount": ETH}, address=weth, log_index=0)
        fill = make_event(seaport.order_filled, fulfilled(
            offer=[(ITEM_ERC20, weth, 0, ETH)],
            consideration=[
                (ITEM_ERC721, NFT_CONTRACT, 5, 1, MAKER),
                (ITEM_ERC20, weth, 0, ETH // 40, FEE_RECIPIENT),
            ],
        ), log_index=1)

        data = await handler.handle([payment, fill])

        assert len(data.fill_events) == 1
        assert data.fill_events[0].order_side == "buy"
        assert data.fill_events[0].currency == weth
        assert data.fill_events[0].currency_price == str(ETH)

        assert len(data.maker_infos) == 1
        trigger = data.maker_infos[0]
        assert trigger.maker == MAKER
        assert trigger.data_kind == "buy-approval"
        assert trigger.contract == weth
        assert trigger.context == f"{TX_HASH}-buy-approval"

    @pytest.mark.asyncio
    async def test_single_approval_recheck_per_maker_and_transaction(self, handler, make_event, settings):
        weth = settings.weth
        payment = make_event(erc20.transfer, {"from": MAKER, "to": TAKER, "amount": ETH}, address=weth, log_index=0)
        fills = [
            make_event(seaport.order_filled, fulfilled(
                order_hash=order_hash,
                offer=[(ITEM_ERC721, NFT_CONTRACT, token_id, 1)],
                consideration=[(ITEM_NATIVE, ZERO_ADDRESS, 0, ETH, MAKER)],
            ), log_index=log_index)
            for log_index, (order_hash, token_id) in enumerate([(ORDER_HASH, 1), (OTHER_ORDER_HASH, 2)], start=1)
        ]

        data = await handler.handle([payment, *fills])

        assert len(data.fill_events) == 2
        assert len(data.maker_infos) == 1

    @pytest.mark.asyncio
    async def test_matched_orders_yield_one_fill(self, handler, make_event, settings):
        weth = settings.weth
        first = make_event(seaport.order_filled, fulfilled(
            order_hash=ORDER_HASH,
            offerer=MAKER,
            recipient=ZERO_ADDRESS,
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1)],
            consideration=[(ITEM_ERC20, weth, 0, ETH, MAKER)],
        ), log_index=1)
        second = make_event(seaport.order_filled, fulfilled(
            order_hash=OTHER_ORDER_HASH,
            offerer=TAKER,
            recipient=ZERO_ADDRESS,
            offer=[(ITEM_ERC20, weth, 0, ETH)],
            consideration=[(ITEM_ERC721, NFT_CONTRACT, 5, 1, TAKER)],
        ), log_index=2)

        data = await handler.handle([first, second])

        assert len(data.fill_events) == 1
        assert data.fill_events[0].order_id == "0x" + "01" * 32
        assert data.fill_events[0].taker == TAKER
        assert len(data.order_infos) == 1

    @pytest.mark.asyncio
    async def test_non_adjacent_orders_are_not_matched(self, handler, make_event, settings):
        weth = settings.weth
        first = make_event(seaport.order_filled, fulfilled(
            recipient=ZERO_ADDRESS,
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1)],
            consideration=[(ITEM_ERC20, weth, 0, ETH, MAKER)],
        ), log_index=1)
        second = make_event(seaport.order_filled, fulfilled(
            order_hash=OTHER_ORDER_HASH,
            offerer=TAKER,
            recipient=ZERO_ADDRESS,
            offer=[(ITEM_ERC20, weth, 0, ETH)],
            consideration=[(ITEM_ERC721, NFT_CONTRACT, 5, 1, TAKER)],
        ), log_index=3)

        data = await handler.handle([first, second])

        assert len(data.fill_events) == 2
        assert data.fill_events[0].taker == ZERO_ADDRESS

    @pytest.mark.asyncio
    async def test_fill_without_native_price_is_dropped(self, handler, make_event):
        payment = make_event(erc20.transfer, {"from": MAKER, "to": TAKER, "amount": 500}, address=ERC20_TOKEN, log_index=0)
        event = make_event(seaport.order_filled, fulfilled(
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1)],
            consideration=[(ITEM_ERC20, ERC20_TOKEN, 0, 500, MAKER)],
        ), log_index=1)

        data = await handler.handle([payment, event])

        assert data.fill_events == []
        assert data.fill_infos == []
        assert data.order_infos == []
        assert data.maker_infos == []

    @pytest.mark.asyncio
    async def test_attribution_taker_overrides_log_recipient(self, handler, make_event):
        from events_sync.attribution import AttributionData

        handler.context.attribution.resolve_attribution = AsyncMock(
            return_value=AttributionData(taker=RELAYER, fill_source_id=3)
        )
        event = make_event(seaport.order_filled, fulfilled(
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1)],
            consideration=[(ITEM_NATIVE, ZERO_ADDRESS, 0, ETH, MAKER)],
        ))

        data = await handler.handle([event])

        assert data.fill_events[0].taker == RELAYER
        assert data.fill_events[0].fill_source_id == 3

    @pytest.mark.asyncio
    async def test_bundle_is_not_a_basic_sale(self, handler, make_event):
        event = make_event(seaport.order_filled, fulfilled(
            offer=[(ITEM_ERC721, NFT_CONTRACT, 5, 1), (ITEM_ERC721, NFT_CONTRACT, 6, 1)],
            consideration=[(ITEM_NATIVE, ZERO_ADDRESS, 0, ETH, MAKER)],
        ))

        data = await handler.handle([event])

        assert data.fill_events == []
        assert len(data.order_infos) == 1


# ============================================================
# CANCELS
# ============================================================

class TestSeaportCancels:

    @pytest.mark.asyncio
    async def test_order_cancelled(self, handler, make_event):
        event = make_event(seaport.order_cancelled, {
            "orderHash": ORDER_HASH, "offerer": MAKER, "zone": ZERO_ADDRESS,
        })

        data = await handler.handle([event])

        order_id = "0x" + "01" * 32
        assert [(c.order_kind, c.order_id) for c in data.cancel_events] == [("seaport", order_id)]
        assert data.order_infos[0].context == f"cancelled-{order_id}"
        assert data.order_infos[0].kind == "cancel"

    @pytest.mark.asyncio
    async def test_counter_incremented_on_v14(self, handler, make_event):
        event = make_event(seaport.v14_counter_incremented, {"newCounter": 4, "offerer": MAKER})

        data = await handler.handle([event])

        bulk = data.bulk_cancel_events[0]
        assert (bulk.order_kind, bulk.maker, bulk.min_nonce) == ("seaport-v1.4", MAKER, "4")


# ============================================================
# VALIDATION
# ============================================================

class TestSeaportValidation:
    """Tests for order reconstruction from OrderValidated."""

    @pytest.mark.asyncio
    async def test_v14_validated_order_is_reconstructed(self, handler, make_event, chain_data):
        params = order_parameters()
        chain_data.call.return_value = "0x" + encode(["uint256"], [3]).hex()
        event = make_event(seaport.v14_order_validated, {
            "orderHash": order_hash_bytes(params, 3),
            "orderParameters": params,
        })

        data = await handler.handle([event])

        assert len(data.orders) == 1
        order = data.orders[0]
        assert order.kind == "seaport-v1.4"
        assert order.order_params["counter"] == "3"
        assert order.order_params["offerer"] == MAKER
        assert order.order_params["signature"] == "0x"

    @pytest.mark.asyncio
    async def test_hash_mismatch_discards_candidate(self, handler, make_event, chain_data):
        params = order_parameters()
        chain_data.call.return_value = "0x" + encode(["uint256"], [4]).hex()
        event = make_event(seaport.v14_order_validated, {
            "orderHash": order_hash_bytes(params, 3),
            "orderParameters": params,
        })

        data = await handler.handle([event])

        assert data.orders == []

    @pytest.mark.asyncio
    async def test_v11_candidates_come_from_validate_calls_in_trace(self, handler, make_event, chain_data):
        wrong = order_parameters(salt=1)
        right = order_parameters(salt=2)
        chain_data.call.return_value = "0x" + encode(["uint256"], [0]).hex()
        chain_data.get_call_trace.return_value = CallFrame(
            call_type="CALL",
            from_address=MAKER,
            to=RELAYER,
            input="0x",
            calls=(
                CallFrame("CALL", RELAYER, ZERO_ADDRESS, VALIDATE.encode_input([[(wrong, b""), (right, b"")]])),
            ),
        )
        event = make_event(seaport.order_validated, {
            "orderHash": order_hash_bytes(right, 0),
            "offerer": MAKER,
            "zone": ZERO_ADDRESS,
        })

        data = await handler.handle([event])

        assert len(data.orders) == 1
        assert data.orders[0].order_params["salt"] == "2"

    @pytest.mark.asyncio
    async def test_trace_failure_only_skips_that_event(self, handler, make_event, chain_data):
        chain_data.get_call_trace.side_effect = FetchError("boom", adapter_name="mock", method="debug_traceTransaction")
        validated = make_event(seaport.order_validated, {
            "orderHash": ORDER_HASH, "offerer": MAKER, "zone": ZERO_ADDRESS,
        }, log_index=0)
        cancelled = make_event(seaport.order_cancelled, {
            "orderHash": OTHER_ORDER_HASH, "offerer": MAKER, "zone": ZERO_ADDRESS,
        }, log_index=1)

        data = await handler.handle([validated, cancelled])

        assert data.orders == []
        assert len(data.cancel_events) == 1
