"""
Tests for the event-only marketplace handlers.

Each test builds the logs with the catalog ABI, runs the handler on
its partition and checks the produced records.
"""

import pytest
from eth_abi import encode

from core.constants import ASSET_CLASS_ERC721, ETH_PLACEHOLDER_ADDRESS, ZERO_ADDRESS
from events_sync.catalog import element, erc20, forward, looks_rare, superrare, universe, x2y2, zeroex_v4
from events_sync.handlers.element import ElementHandler
from events_sync.handlers.forward import ForwardHandler
from events_sync.handlers.looks_rare import LooksRareHandler
from events_sync.handlers.superrare import SuperRareHandler, superrare_order_id
from events_sync.handlers.universe import UniverseHandler
from events_sync.handlers.x2y2 import INTENT_BUY, INTENT_SELL, X2Y2Handler
from events_sync.handlers.zeroex_v4 import DIRECTION_BUY, DIRECTION_SELL, ZeroExV4Handler

from tests.factories import ERC20_TOKEN, MAKER, NFT_CONTRACT, ORDER_HASH, OTHER_ORDER_HASH, TAKER, TX_HASH


ETH = 10 ** 18
ORDER_ID = "0x" + "01" * 32


def element_erc721_fill(taker=TAKER, token=ETH_PLACEHOLDER_ADDRESS):
    return {
        "maker": MAKER,
        "taker": taker,
        "erc20Token": token,
        "erc20TokenAmount": ETH,
        "erc721Token": NFT_CONTRACT,
        "erc721TokenId": 3,
        "orderHash": ORDER_HASH,
    }


# ============================================================
# ELEMENT
# ============================================================

class TestElementHandler:
    """Tests for Element fills and nonce cancels."""

    @pytest.mark.asyncio
    async def test_erc721_sell_fill_with_native_placeholder(self, handler_context, make_event, settings):
        event = make_event(element.erc721_sell_order_filled, element_erc721_fill())

        data = await ElementHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert fill.order_kind == "element-erc721"
        assert fill.order_side == "sell"
        assert fill.currency == settings.native_currency
        assert (fill.token_id, fill.amount, fill.price) == ("3", "1", str(ETH))
        assert data.order_infos[0].context == f"filled-{ORDER_ID}-{TX_HASH}"

    @pytest.mark.asyncio
    async def test_erc1155_buy_fill_uses_unit_price(self, handler_context, make_event, settings):
        event = make_event(element.erc1155_buy_order_filled, {
            "maker": MAKER,
            "taker": TAKER,
            "erc20Token": settings.weth,
            "erc20FillAmount": 3 * ETH,
            "erc1155Token": NFT_CONTRACT,
            "erc1155TokenId": 9,
            "erc1155FillAmount": 3,
            "orderHash": ORDER_HASH,
        })

        data = await ElementHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert fill.order_kind == "element-erc1155"
        assert fill.order_side == "buy"
        assert (fill.amount, fill.currency_price) == ("3", str(ETH))

    @pytest.mark.asyncio
    async def test_hash_nonce_increment_cancels_both_kinds(self, handler_context, make_event):
        event = make_event(element.hash_nonce_incremented, {"maker": MAKER, "newHashNonce": 5})

        data = await ElementHandler(handler_context).handle([event])

        assert [(b.order_kind, b.min_nonce, b.base_event_params.batch_index) for b in data.bulk_cancel_events] == [
            ("element-erc721", "5", 1),
            ("element-erc1155", "5", 2),
        ]

    @pytest.mark.asyncio
    async def test_order_cancelled(self, handler_context, make_event):
        event = make_event(element.erc1155_order_cancelled, {"maker": MAKER, "nonce": 11})

        data = await ElementHandler(handler_context).handle([event])

        cancel = data.nonce_cancel_events[0]
        assert (cancel.order_kind, cancel.maker, cancel.nonce) == ("element-erc1155", MAKER, "11")


# ============================================================
# ZEROEX V4
# ============================================================

class TestZeroExV4Handler:

    @pytest.mark.asyncio
    async def test_erc721_fill_consumes_the_nonce(self, handler_context, make_event, settings):
        event = make_event(zeroex_v4.erc721_order_filled, {
            "direction": DIRECTION_SELL,
            "maker": MAKER,
            "taker": TAKER,
            "nonce": 77,
            "erc20Token": settings.weth,
            "erc20TokenAmount": ETH,
            "erc721Token": NFT_CONTRACT,
            "erc721TokenId": 1,
            "matcher": ZERO_ADDRESS,
        })

        data = await ZeroExV4Handler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert fill.order_id is None
        assert fill.order_side == "sell"
        assert data.fill_infos[0].context == f"zeroex-v4-erc721-{MAKER}-77-{TX_HASH}"
        assert [c.nonce for c in data.nonce_cancel_events] == ["77"]
        assert data.order_infos == []

    @pytest.mark.asyncio
    async def test_erc1155_fill_keeps_the_nonce(self, handler_context, make_event, settings):
        event = make_event(zeroex_v4.erc1155_order_filled, {
            "direction": DIRECTION_BUY,
            "maker": MAKER,
            "taker": TAKER,
            "nonce": 78,
            "erc20Token": settings.weth,
            "erc20FillAmount": 4 * ETH,
            "erc1155Token": NFT_CONTRACT,
            "erc1155TokenId": 2,
            "erc1155FillAmount": 2,
            "matcher": ZERO_ADDRESS,
        })

        data = await ZeroExV4Handler(handler_context).handle([event])

        assert data.fill_events[0].order_side == "buy"
        assert data.fill_events[0].currency_price == str(2 * ETH)
        assert data.nonce_cancel_events == []

    @pytest.mark.asyncio
    async def test_cancel(self, handler_context, make_event):
        event = make_event(zeroex_v4.erc721_order_cancelled, {"maker": MAKER, "nonce": 3})

        data = await ZeroExV4Handler(handler_context).handle([event])

        assert data.nonce_cancel_events[0].order_kind == "zeroex-v4-erc721"


# ============================================================
# X2Y2
# ============================================================

def x2y2_inventory(intent=INTENT_SELL, delegate_type=1, items=None, detail_price=ETH, currency=ZERO_ADDRESS):
    if items is None:
        items = [(NFT_CONTRACT, 12)]
    layout = "(address,uint256)[]" if delegate_type == 1 else "(address,uint256,uint256)[]"
    return {
        "itemHash": ORDER_HASH,
        "maker": MAKER,
        "taker": TAKER,
        "orderSalt": 1,
        "settleSalt": 2,
        "intent": intent,
        "delegateType": delegate_type,
        "deadline": 0,
        "currency": currency,
        "dataMask": b"",
        "item": (ETH, encode([layout], [items])),
        "detail": (1, 0, 0, detail_price, ORDER_HASH, ZERO_ADDRESS, b"", 0, 0, 0, []),
    }


class TestX2Y2Handler:

    @pytest.mark.asyncio
    async def test_sell_inventory(self, handler_context, make_event):
        event = make_event(x2y2.order_inventory, x2y2_inventory())

        data = await X2Y2Handler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert (fill.order_kind, fill.order_id, fill.order_side) == ("x2y2", ORDER_ID, "sell")
        assert (fill.contract, fill.token_id, fill.amount) == (NFT_CONTRACT, "12", "1")

    @pytest.mark.asyncio
    async def test_erc1155_buy_inventory_divides_by_amount(self, handler_context, make_event):
        event = make_event(x2y2.order_inventory, x2y2_inventory(
            intent=INTENT_BUY,
            delegate_type=2,
            items=[(NFT_CONTRACT, 12, 4)],
            detail_price=4 * ETH,
        ))

        data = await X2Y2Handler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert fill.order_side == "buy"
        assert (fill.amount, fill.currency_price) == ("4", str(ETH))

    @pytest.mark.asyncio
    async def test_multi_item_inventory_is_ignored(self, handler_context, make_event):
        event = make_event(x2y2.order_inventory, x2y2_inventory(items=[(NFT_CONTRACT, 1), (NFT_CONTRACT, 2)]))

        data = await X2Y2Handler(handler_context).handle([event])

        assert data.fill_events == []

    @pytest.mark.asyncio
    async def test_cancel(self, handler_context, make_event):
        event = make_event(x2y2.order_cancelled, {"itemHash": ORDER_HASH})

        data = await X2Y2Handler(handler_context).handle([event])

        assert data.cancel_events[0].order_id == ORDER_ID
        assert data.order_infos[0].context == f"cancelled-{ORDER_ID}"


# ============================================================
# LOOKSRARE
# ============================================================

def looks_rare_fill(currency):
    return {
        "orderHash": ORDER_HASH,
        "orderNonce": 1,
        "taker": TAKER,
        "maker": MAKER,
        "strategy": ZERO_ADDRESS,
        "currency": currency,
        "collection": NFT_CONTRACT,
        "tokenId": 4,
        "amount": 1,
        "price": ETH,
    }


class TestLooksRareHandler:

    @pytest.mark.asyncio
    async def test_taker_ask_fills_a_bid(self, handler_context, make_event, settings):
        event = make_event(looks_rare.taker_ask, looks_rare_fill(settings.weth))

        data = await LooksRareHandler(handler_context).handle([event])

        assert data.fill_events[0].order_side == "buy"
        assert data.fill_events[0].maker == MAKER

    @pytest.mark.asyncio
    async def test_taker_bid_fills_a_listing(self, handler_context, make_event, settings):
        event = make_event(looks_rare.taker_bid, looks_rare_fill(settings.weth))

        data = await LooksRareHandler(handler_context).handle([event])

        assert data.fill_events[0].order_side == "sell"

    @pytest.mark.asyncio
    async def test_cancel_multiple_orders_gets_distinct_batch_indexes(self, handler_context, make_event):
        event = make_event(looks_rare.cancel_multiple_orders, {"user": MAKER, "orderNonces": [4, 5, 6]})

        data = await LooksRareHandler(handler_context).handle([event])

        assert [(c.nonce, c.base_event_params.batch_index) for c in data.nonce_cancel_events] == [
            ("4", 1), ("5", 2), ("6", 3),
        ]

    @pytest.mark.asyncio
    async def test_cancel_all_orders(self, handler_context, make_event):
        event = make_event(looks_rare.cancel_all_orders, {"user": MAKER, "newMinNonce": 9})

        data = await LooksRareHandler(handler_context).handle([event])

        assert data.bulk_cancel_events[0].min_nonce == "9"


# ============================================================
# FORWARD
# ============================================================

class TestForwardHandler:

    @pytest.mark.asyncio
    async def test_fill_is_a_weth_bid(self, handler_context, make_event, settings):
        event = make_event(forward.order_filled, {
            "orderHash": ORDER_HASH,
            "maker": MAKER,
            "taker": TAKER,
            "token": NFT_CONTRACT,
            "identifier": 8,
            "filledAmount": 2,
            "unitPrice": ETH,
        })

        data = await ForwardHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert (fill.order_side, fill.currency) == ("buy", settings.weth)
        assert (fill.amount, fill.currency_price) == ("2", str(ETH))

    @pytest.mark.asyncio
    async def test_counter_incremented(self, handler_context, make_event):
        event = make_event(forward.counter_incremented, {"maker": MAKER, "newCounter": 2})

        data = await ForwardHandler(handler_context).handle([event])

        assert (data.bulk_cancel_events[0].order_kind, data.bulk_cancel_events[0].min_nonce) == ("forward", "2")


# ============================================================
# SUPERRARE
# ============================================================

class TestSuperRareHandler:

    @pytest.mark.asyncio
    async def test_listing_filled(self, handler_context, make_event, settings):
        event = make_event(superrare.listing_filled, {
            "originContract": NFT_CONTRACT,
            "buyer": TAKER,
            "seller": MAKER,
            "currencyAddress": ZERO_ADDRESS,
            "amount": ETH,
            "tokenId": 15,
        })

        data = await SuperRareHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert fill.order_id == superrare_order_id(NFT_CONTRACT, 15, settings.native_currency, ETH)
        assert (fill.order_side, fill.maker, fill.taker) == ("sell", MAKER, TAKER)
        assert data.order_infos == []

    @pytest.mark.asyncio
    async def test_accept_offer_is_a_bid(self, handler_context, make_event, settings):
        event = make_event(superrare.accept_offer, {
            "originContract": NFT_CONTRACT,
            "bidder": TAKER,
            "seller": MAKER,
            "currencyAddress": settings.weth,
            "amount": ETH,
            "tokenId": 15,
            "splitAddresses": [MAKER],
            "splitRatios": [100],
        })

        data = await SuperRareHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert (fill.order_side, fill.maker, fill.taker) == ("buy", TAKER, MAKER)

    def test_order_id_depends_on_price(self):
        assert superrare_order_id(NFT_CONTRACT, 1, ZERO_ADDRESS, 1) != superrare_order_id(NFT_CONTRACT, 1, ZERO_ADDRESS, 2)


# ============================================================
# UNIVERSE
# ============================================================

class TestUniverseHandler:

    @pytest.mark.asyncio
    async def test_match_with_nft_on_the_left_is_a_sale(self, handler_context, make_event):
        nft = ((bytes.fromhex(ASSET_CLASS_ERC721[2:]), encode(["address", "uint256"], [NFT_CONTRACT, 21])), 1)
        payment = ((bytes.fromhex("aaaebeba"), b""), ETH)
        event = make_event(universe.match, {
            "leftHash": ORDER_HASH,
            "rightHash": OTHER_ORDER_HASH,
            "leftMaker": MAKER,
            "rightMaker": TAKER,
            "newLeftFill": ETH,
            "newRightFill": 1,
            "leftAsset": nft,
            "rightAsset": payment,
        })

        data = await UniverseHandler(handler_context).handle([event])

        fill = data.fill_events[0]
        assert (fill.order_kind, fill.order_id, fill.order_side) == ("universe", ORDER_ID, "sell")
        assert (fill.maker, fill.taker, fill.token_id) == (MAKER, TAKER, "21")
        assert fill.price == str(ETH)


# ============================================================
# ISOLATION
# ============================================================

class TestHandlerIsolation:
    """A failing event never prevents the rest of the partition."""

    @pytest.mark.asyncio
    async def test_undecodable_inventory_does_not_stop_the_partition(self, handler_context, make_event):
        broken = x2y2_inventory()
        broken["item"] = (ETH, b"\x01\x02")
        events = [
            make_event(x2y2.order_inventory, broken, log_index=0),
            make_event(x2y2.order_cancelled, {"itemHash": OTHER_ORDER_HASH}, log_index=1),
        ]

        data = await X2Y2Handler(handler_context).handle(events)

        assert data.fill_events == []
        assert len(data.cancel_events) == 1

    @pytest.mark.asyncio
    async def test_unpriced_currency_drops_fill_and_triggers(self, handler_context, make_event):
        events = [
            make_event(erc20.transfer, {"from": MAKER, "to": TAKER, "amount": ETH}, address=ERC20_TOKEN, log_index=0),
            make_event(looks_rare.taker_bid, looks_rare_fill(ERC20_TOKEN), log_index=1),
            make_event(looks_rare.cancel_multiple_orders, {"user": MAKER, "orderNonces": [7]}, log_index=2),
        ]

        data = await LooksRareHandler(handler_context).handle(events)

        assert data.fill_events == []
        assert data.fill_infos == []
        assert data.order_infos == []
        assert data.maker_infos == []
        assert [c.nonce for c in data.nonce_cancel_events] == ["7"]

    @pytest.mark.asyncio
    async def test_erc20_transfer_in_partition_triggers_recheck(self, handler_context, make_event, settings):
        events = [
            make_event(erc20.transfer, {"from": MAKER, "to": TAKER, "amount": ETH}, address=settings.weth, log_index=0),
            make_event(element.erc721_buy_order_filled, element_erc721_fill(token=settings.weth), log_index=1),
        ]

        data = await ElementHandler(handler_context).handle(events)

        assert [t.contract for t in data.maker_infos] == [settings.weth]
