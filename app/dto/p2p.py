from dataclasses import dataclass
from typing import List, Optional

from app.models.mongodb.p2p_order import P2POrder


@dataclass
class OrderDto:
    order_id: str
    wallet: str
    side: str
    amount: float
    price: float
    status: str
    created_at: str
    counterparty: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_model(cls, order: P2POrder) -> 'OrderDto':
        return cls(
            order_id=order.order_id,
            wallet=order.wallet,
            side=order.side.value,
            amount=order.amount,
            price=order.price,
            status=order.status.value,
            created_at=order.created_at.isoformat() if order.created_at else None,
            counterparty=order.counterparty,
            completed_at=order.completed_at.isoformat() if order.completed_at else None
        )


@dataclass
class OrderResultDto:
    order: OrderDto


@dataclass
class OrderListDto:
    orders: List[OrderDto]

