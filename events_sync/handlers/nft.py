"""
Protocol Handlers - ERC721 / ERC1155.

Batch transfers are flattened into one record per entry, each with
its own batch index (starting at 1) so the records stay unique per
(tx hash, log index, batch index).
"""

from events_sync.handlers.base import BaseEventHandler, EventCursor
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    ClassifiedEvent,
    MakerApprovalTrigger,
    NftApprovalEvent,
    NftTransferEvent,
    OnChainData,
)


class NftHandler(BaseEventHandler):
    family = ProtocolFamily.NFT

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        args = event.decode()
        params = event.base_event_params

        if event.kind == "erc721-transfer":
            self._push_transfer(data, event, "erc721", args, args["tokenId"], 1, params.batch_index)

        elif event.kind == "erc1155-transfer-single":
            self._push_transfer(data, event, "erc1155", args, args["tokenId"], args["amount"], params.batch_index)

        elif event.kind == "erc1155-transfer-batch":
            token_ids, amounts = args["tokenIds"], args["amounts"]
            for offset, (token_id, amount) in enumerate(zip(token_ids, amounts)):
                self._push_transfer(data, event, "erc1155", args, token_id, amount, params.batch_index + offset)

        elif event.kind == "erc721/1155-approval-for-all":
            owner = args["owner"].lower()
            operator = args["operator"].lower()
            data.nft_approval_events.append(
                NftApprovalEvent(
                    owner=owner,
                    operator=operator,
                    approved=bool(args["approved"]),
                    base_event_params=params,
                )
            )
            data.add_maker_info(
                MakerApprovalTrigger(
                    context=f"{params.tx_hash}-{params.log_index}",
                    maker=owner,
                    data_kind="sell-approval",
                    contract=params.address,
                    tx_hash=params.tx_hash,
                    tx_timestamp=params.timestamp,
                )
            )

    def _push_transfer(self, data, event, kind, args, token_id, amount, batch_index) -> None:
        data.nft_transfer_events.append(
            NftTransferEvent(
                kind=kind,
                from_address=args["from"].lower(),
                to_address=args["to"].lower(),
                token_id=str(token_id),
                amount=str(amount),
                base_event_params=event.base_event_params.with_batch_index(batch_index),
            )
        )
