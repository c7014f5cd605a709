"""
Protocol Handlers - Rarible.

Match events are reconciled against the transaction calldata
(see `events_sync.rarible_calldata`).
"""

import logging

from core.exceptions import TraceUnavailableError, UnsupportedAssetError
from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import CancelEvent, ClassifiedEvent, OnChainData
from events_sync.rarible_calldata import (
    decode_currency,
    decode_match_calldata,
    decode_nft,
    ensure_supported,
)
from onchain_adapters.exceptions import OnchainAdapterError


logger = logging.getLogger(__name__)

ORDER_KIND = "rarible"


class RaribleHandler(BaseEventHandler):
    family = ProtocolFamily.RARIBLE

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        if event.kind == "rarible-cancel":
            order_id = event.decode()["hash"].lower()
            data.cancel_events.append(
                CancelEvent(
                    order_kind=ORDER_KIND,
                    order_id=order_id,
                    base_event_params=event.base_event_params,
                )
            )
            self.push_cancel_trigger(data, event, order_id)

        elif event.kind == "rarible-match":
            await self._on_match(event, data)

    async def _on_match(self, event: ClassifiedEvent, data: OnChainData) -> None:
        args = event.decode()
        left_hash = args["leftHash"].lower()
        new_left_fill = args["newLeftFill"]
        new_right_fill = args["newRightFill"]
        tx_hash = event.base_event_params.tx_hash

        try:
            tx = await self.context.chain_data.get_transaction(tx_hash)
        except OnchainAdapterError as e:
            raise TraceUnavailableError(
                "Failed to fetch transaction",
                kind=event.kind,
                tx_hash=tx_hash,
                cause=e,
            ) from e

        order = decode_match_calldata(tx)
        if order is None:
            logger.debug(f"[{self.name}] No known entry point in {tx_hash}")
            return
        ensure_supported(order)

        side = "sell" if order.make_asset.is_nft else "buy"
        nft_asset = order.make_asset if side == "sell" else order.take_asset
        currency_asset = order.take_asset if side == "sell" else order.make_asset
        if not nft_asset.is_nft:
            raise UnsupportedAssetError(
                "Match without an NFT side",
                asset_class=nft_asset.asset_class,
                tx_hash=tx_hash,
            )

        currency = self.normalize_currency(
            decode_currency(currency_asset, self.context.settings.native_currency)
        )
        contract, token_id = decode_nft(nft_asset)

        amount = new_right_fill if side == "sell" else new_left_fill
        total = new_left_fill if side == "sell" else new_right_fill
        currency_price = str(total // amount)

        attribution = await self.resolve_attribution(event, ORDER_KIND, left_hash)
        taker = apply_taker_overrides(order.taker or tx.from_address, attribution)

        fill = await self.push_fill(
            data,
            event,
            order_kind=ORDER_KIND,
            order_id=left_hash,
            order_side=side,
            maker=order.maker,
            taker=taker,
            currency=currency,
            currency_price=currency_price,
            contract=contract,
            token_id=token_id,
            amount=str(amount),
            attribution=attribution,
        )
        if fill is None:
            return
        self.push_sale_trigger(data, event, left_hash)
