from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum

# NOTE: metadata.type 값 (충전 예약 사가)
BOOKING_SAGA_TYPE = "charging_booking"


class SagaStatus(str, Enum):
    PENDING = "pending"  # 시작 전
    IN_PROGRESS = "in_progress"  # 진행 중
    COMPLETED = "completed"  # 성공 완료
    COMPENSATING = "compensating"  # 보상 트랜잭션 실행 중
    COMPENSATED = "compensated"  # 보상 완료 (롤백 완료)
    FAILED = "failed"  # 실패 (보상 불가)


class StepStatus(str, Enum):
    PENDING = "pending"  # 실행 전
    COMPLETED = "completed"  # 성공
    FAILED = "failed"  # 실패
    COMPENSATED = "compensated"  # 보상 완료


@dataclass
class SagaStep:
    # 단계 이름 (예: "record_ledger", "create_session", "adjust_balance")
    name: str
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    compensated_at: Optional[datetime] = None
    error_message: Optional[str] = None

    # 보상 트랜잭션에 필요한 데이터 (예: 취소할 charge_id)
    compensation_data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'status': self.status.value,
            'started_at': self.started_at,
            'completed_at': self.completed_at,
            'compensated_at': self.compensated_at,
            'error_message': self.error_message,
            'compensation_data': self.compensation_data
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SagaStep':
        return cls(
            name=data['name'],
            status=StepStatus(data.get('status', 'pending')),
            started_at=data.get('started_at'),
            completed_at=data.get('completed_at'),
            compensated_at=data.get('compensated_at'),
            error_message=data.get('error_message'),
            compensation_data=data.get('compensation_data') or {}
        )


@dataclass
class SagaTransactionLog:
    transaction_id: str
    status: SagaStatus = SagaStatus.PENDING

    # 실행할 단계들 (순서 보장)
    steps: List[SagaStep] = field(default_factory=list)

    created_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    compensation_started_at: Optional[datetime] = None
    compensation_completed_at: Optional[datetime] = None

    # 메타 데이터 (saga 종류, charge_id, wallet 등 복구/추적용)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'transaction_id': self.transaction_id,
            'status': self.status.value,
            'steps': [step.to_dict() for step in self.steps],
            'created_at': self.created_at,
            'completed_at': self.completed_at,
            'compensation_started_at': self.compensation_started_at,
            'compensation_completed_at': self.compensation_completed_at,
            'metadata': self.metadata
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SagaTransactionLog':
        return cls(
            transaction_id=data['transaction_id'],
            status=SagaStatus(data.get('status', 'pending')),
            steps=[SagaStep.from_dict(step) for step in data.get('steps', [])],
            created_at=data.get('created_at', datetime.utcnow()),
            completed_at=data.get('completed_at'),
            compensation_started_at=data.get('compensation_started_at'),
            compensation_completed_at=data.get('compensation_completed_at'),
            metadata=data.get('metadata', {})
        )

    def add_step(self, step_name: str, compensation_data: Dict[str, Any] = None):
        self.steps.append(SagaStep(
            name=step_name,
            compensation_data=compensation_data or {}
        ))

    def get_step(self, step_name: str) -> Optional[SagaStep]:
        for step in self.steps:
            if step.name == step_name:
                return step
        return None

    def is_step_completed(self, step_name: str) -> bool:
        step = self.get_step(step_name)
        return step is not None and step.status == StepStatus.COMPLETED


class SagaTransactionLogRepository:
    COLLECTION_NAME = 'saga_transaction_log'

    def __init__(self, db):
        self.collection = db[self.COLLECTION_NAME]
        # NOTE : 인덱스 생성
        self.collection.create_index('transaction_id', unique=True)
        self.collection.create_index([('created_at', -1)])
        self.collection.create_index([('status', 1), ('metadata.type', 1)])

    def _set(self, transaction_id: str, fields: Dict):
        self.collection.update_one(
            {'transaction_id': transaction_id},
            {'$set': fields}
        )

    # NOTE : 사가 로그 생성
    def insert(self, saga_log: SagaTransactionLog):
        self.collection.insert_one(saga_log.to_dict())

    def find_by_transaction_id(self, transaction_id: str) -> Optional[SagaTransactionLog]:
        doc = self.collection.find_one({'transaction_id': transaction_id})
        return SagaTransactionLog.from_dict(doc) if doc else None

    def find_by_charge_id(self, charge_id: str) -> Optional[SagaTransactionLog]:
        doc = self.collection.find_one({'metadata.charge_id': charge_id})
        return SagaTransactionLog.from_dict(doc) if doc else None

    # NOTE : 일정 시간 이상 in_progress에 머문 사가 (단계 사이에서 프로세스가 죽은 경우)
    def find_stuck(self, saga_type: str, older_than_seconds: int, limit: int = 100) -> List[SagaTransactionLog]:
        cutoff = datetime.utcnow() - timedelta(seconds=older_than_seconds)
        cursor = self.collection.find({
            'status': SagaStatus.IN_PROGRESS.value,
            'metadata.type': saga_type,
            'created_at': {'$lt': cutoff}
        }).sort('created_at', 1).limit(limit)
        return [SagaTransactionLog.from_dict(doc) for doc in cursor]

    # NOTE : 특정 단계 업데이트
    def update_step(self, transaction_id: str, step_index: int, update_data: Dict):
        self._set(transaction_id, {
            f'steps.{step_index}.{key}': value
            for key, value in update_data.items()
        })

    def mark_step_failed(self, transaction_id: str, step_index: int, error_message: str):
        self.update_step(transaction_id, step_index, {
            'status': StepStatus.FAILED.value,
            'error_message': error_message,
            'completed_at': datetime.utcnow()
        })

    def mark_step_compensated(self, transaction_id: str, step_index: int):
        self.update_step(transaction_id, step_index, {
            'status': StepStatus.COMPENSATED.value,
            'compensated_at': datetime.utcnow()
        })

    def start_compensation(self, transaction_id: str):
        self._set(transaction_id, {
            'status': SagaStatus.COMPENSATING.value,
            'compensation_started_at': datetime.utcnow()
        })

    def complete_compensation(self, transaction_id: str):
        self._set(transaction_id, {
            'status': SagaStatus.COMPENSATED.value,
            'compensation_completed_at': datetime.utcnow()
        })

    def complete_saga(self, transaction_id: str):
        self._set(transaction_id, {
            'status': SagaStatus.COMPLETED.value,
            'completed_at': datetime.utcnow()
        })

    # NOTE : 사가 실패로 표시 (보상 불가능 - 수동 개입 대상)
    def mark_failed(self, transaction_id: str):
        self._set(transaction_id, {
            'status': SagaStatus.FAILED.value,
            'completed_at': datetime.utcnow()
        })

    # NOTE : 오래된 로그 삭제 (기본 30일 이전, 정상 종료된 것만)
    def delete_old_logs(self, days: int = 30) -> int:
        cutoff_date = datetime.utcnow() - timedelta(days=days)

        result = self.collection.delete_many({
            'created_at': {'$lt': cutoff_date},
            'status': {'$in': [SagaStatus.COMPLETED.value, SagaStatus.COMPENSATED.value]}
        })
        return result.deleted_count
