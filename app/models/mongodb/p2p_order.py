from datetime import datetime
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from enum import Enum

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"

    @property
    def opposite(self) -> 'OrderSide':
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY


class OrderStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


@dataclass
class P2POrder:
    wallet: str
    side: OrderSide
    amount: float
    price: float
    status: OrderStatus = OrderStatus.OPEN
    counterparty: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    order_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'wallet': self.wallet,
            'side': self.side.value,
            'amount': self.amount,
            'price': self.price,
            'status': self.status.value,
            'counterparty': self.counterparty,
            'created_at': self.created_at,
            'completed_at': self.completed_at
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'P2POrder':
        return cls(
            order_id=str(data['_id']) if data.get('_id') else None,
            wallet=data['wallet'],
            side=OrderSide(data['side']),
            amount=data['amount'],
            price=data['price'],
            status=OrderStatus(data.get('status', 'open')),
            counterparty=data.get('counterparty'),
            created_at=data.get('created_at', datetime.utcnow()),
            completed_at=data.get('completed_at')
        )


def to_object_id(order_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(order_id)
    except (InvalidId, TypeError):
        return None


class P2POrderRepository:

    COLLECTION_NAME = 'p2p_orders'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        self.collection.create_index([('side', 1), ('status', 1)])
        self.collection.create_index([('wallet', 1), ('created_at', -1)])

    def insert(self, order: P2POrder) -> P2POrder:
        result = self.collection.insert_one(order.to_dict())
        order.order_id = str(result.inserted_id)
        return order

    def find_by_id(self, order_id: str) -> Optional[P2POrder]:
        object_id = to_object_id(order_id)
        if object_id is None:
            return None
        doc = self.collection.find_one({'_id': object_id})
        return P2POrder.from_dict(doc) if doc else None

    def find_open_by_side(self, side: OrderSide, limit: int = 50) -> List[P2POrder]:
        cursor = self.collection.find({
            'side': side.value,
            'status': OrderStatus.OPEN.value
        }).sort('created_at', -1).limit(min(limit, 100))
        return [P2POrder.from_dict(doc) for doc in cursor]

    def execute(self, order_id: str, counterparty: str) -> Optional[P2POrder]:
        """open 주문을 completed로 전이. 없거나 이미 체결된 주문이면 None"""
        object_id = to_object_id(order_id)
        if object_id is None:
            return None

        doc = self.collection.find_one_and_update(
            {
                '_id': object_id,
                'status': OrderStatus.OPEN.value,
                'wallet': {'$ne': counterparty}
            },
            {
                '$set': {
                    'status': OrderStatus.COMPLETED.value,
                    'counterparty': counterparty,
                    'completed_at': datetime.utcnow()
                }
            },
            return_document=ReturnDocument.AFTER
        )
        return P2POrder.from_dict(doc) if doc else None
