"""
Protocol Handlers - Universe.

Universe events carry both assets, so no calldata lookup is needed.
"""

from core.constants import NFT_ASSET_CLASSES
from core.exceptions import UnsupportedAssetError
from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import CancelEvent, ClassifiedEvent, OnChainData
from events_sync.rarible_calldata import RaribleAsset, decode_currency, decode_nft


ORDER_KIND = "universe"


def _asset(value) -> RaribleAsset:
    (asset_class, data), amount = value
    return RaribleAsset(asset_class.lower(), data, amount)


class UniverseHandler(BaseEventHandler):
    family = ProtocolFamily.UNIVERSE

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        args = event.decode()

        if event.kind == "universe-cancel":
            order_id = args["hash"].lower()
            data.cancel_events.append(
                CancelEvent(
                    order_kind=ORDER_KIND,
                    order_id=order_id,
                    base_event_params=event.base_event_params,
                )
            )
            self.push_cancel_trigger(data, event, order_id)

        elif event.kind == "universe-match":
            left_hash = args["leftHash"].lower()
            left_asset = _asset(args["leftAsset"])
            right_asset = _asset(args["rightAsset"])

            side = "sell" if left_asset.asset_class in NFT_ASSET_CLASSES else "buy"
            nft_asset = left_asset if side == "sell" else right_asset
            currency_asset = right_asset if side == "sell" else left_asset
            if not nft_asset.is_nft:
                raise UnsupportedAssetError(
                    "Match without an NFT side",
                    asset_class=nft_asset.asset_class,
                )

            currency = self.normalize_currency(
                decode_currency(currency_asset, self.context.settings.native_currency)
            )
            contract, token_id = decode_nft(nft_asset)

            new_left_fill = args["newLeftFill"]
            new_right_fill = args["newRightFill"]
            amount = new_right_fill if side == "sell" else new_left_fill
            total = new_left_fill if side == "sell" else new_right_fill

            maker = args["leftMaker"].lower()
            attribution = await self.resolve_attribution(event, ORDER_KIND, left_hash)
            taker = apply_taker_overrides(args["rightMaker"], attribution)

            fill = await self.push_fill(
                data,
                event,
                order_kind=ORDER_KIND,
                order_id=left_hash,
                order_side=side,
                maker=maker,
                taker=taker,
                currency=currency,
                currency_price=str(total // amount),
                contract=contract,
                token_id=token_id,
                amount=str(amount),
                attribution=attribution,
            )
            if fill is None:
                return
            self.push_sale_trigger(data, event, left_hash)
