from dataclasses import dataclass


@dataclass
class PurchaseResultDto:
    purchase_id: str
    item_id: str
    cost: float
    new_token_balance: float
    timestamp: str
    processing_time: int
