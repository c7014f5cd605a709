"""
Protocol Handlers - ERC20 and wrapped native token.

Deposits and withdrawals of the wrapped native token are recorded
as mints and burns so balances can be rebuilt from transfers alone.
"""

from core.constants import ZERO_ADDRESS
from events_sync.handlers.base import BaseEventHandler, EventCursor
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    ClassifiedEvent,
    FtTransferEvent,
    MakerApprovalTrigger,
    OnChainData,
)


class Erc20Handler(BaseEventHandler):
    family = ProtocolFamily.ERC20

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        if event.kind == "erc20-approval":
            self._on_approval(event, data)
            return

        args = event.decode()
        if event.kind == "erc20-transfer":
            from_address, to_address = args["from"], args["to"]
        elif event.kind == "weth-deposit":
            from_address, to_address = ZERO_ADDRESS, args["to"]
        elif event.kind == "weth-withdrawal":
            from_address, to_address = args["from"], ZERO_ADDRESS
        else:
            return

        data.ft_transfer_events.append(
            FtTransferEvent(
                from_address=from_address.lower(),
                to_address=to_address.lower(),
                amount=str(args["amount"]),
                base_event_params=event.base_event_params,
            )
        )

    def _on_approval(self, event: ClassifiedEvent, data: OnChainData) -> None:
        args = event.decode()
        params = event.base_event_params
        data.add_maker_info(
            MakerApprovalTrigger(
                context=f"{params.tx_hash}-{params.log_index}",
                maker=args["owner"].lower(),
                data_kind="buy-approval",
                contract=params.address,
                tx_hash=params.tx_hash,
                tx_timestamp=params.timestamp,
            )
        )
