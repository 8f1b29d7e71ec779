from datetime import datetime, timedelta

import pytest

from app.models.mongodb.charging_session import ChargingSession, ChargingSessionRepository, SessionStatus
from app.models.mongodb.saga_transaction_log import (
    SagaTransactionLog,
    SagaTransactionLogRepository,
    SagaStatus,
    StepStatus,
    BOOKING_SAGA_TYPE
)
from common.scheduler.jobs import SagaRecoveryJob, SagaLogCleanupJob

from conftest import WALLET

STEP_NAMES = ('record_ledger', 'create_session', 'adjust_balance')


@pytest.fixture
def saga_repo(mongo_db):
    return SagaTransactionLogRepository(mongo_db)


@pytest.fixture
def session_repo(mongo_db):
    return ChargingSessionRepository(mongo_db)


def _stuck_saga(saga_repo, transaction_id, completed_steps, minutes_ago=10, status=SagaStatus.IN_PROGRESS):
    saga_log = SagaTransactionLog(
        transaction_id=transaction_id,
        status=status,
        created_at=datetime.utcnow() - timedelta(minutes=minutes_ago),
        metadata={'type': BOOKING_SAGA_TYPE, 'charge_id': f'CHG-{transaction_id}', 'wallet': WALLET}
    )
    for name in STEP_NAMES:
        saga_log.add_step(name)
    for step in saga_log.steps[:completed_steps]:
        step.status = StepStatus.COMPLETED
    saga_repo.insert(saga_log)
    return saga_log


def _active_session(session_repo, charge_id):
    session_repo.insert(ChargingSession(
        charge_id=charge_id,
        station_id='STN-001',
        wallet=WALLET,
        energy_kwh=10,
        cost=5,
        signature='sig',
        explorer_link='link'
    ))


class TestSagaRecoveryJob:

    def test_cancels_session_of_saga_stuck_before_balance_step(self, app_context, saga_repo, session_repo):
        _stuck_saga(saga_repo, 'T1', completed_steps=2)
        _active_session(session_repo, 'CHG-T1')

        summary = SagaRecoveryJob(older_than_seconds=300).execute()

        assert summary == {'completed': 0, 'compensated': 1, 'failed': 0}
        assert session_repo.find_by_charge_id('CHG-T1').status is SessionStatus.CANCELLED
        assert saga_repo.find_by_transaction_id('T1').status is SagaStatus.COMPENSATED

    def test_saga_stuck_before_session_creation(self, app_context, saga_repo):
        _stuck_saga(saga_repo, 'T1', completed_steps=1)

        summary = SagaRecoveryJob(older_than_seconds=300).execute()

        assert summary['compensated'] == 1
        assert saga_repo.find_by_transaction_id('T1').status is SagaStatus.COMPENSATED

    def test_completes_saga_whose_balance_step_finished(self, app_context, saga_repo, session_repo):
        _stuck_saga(saga_repo, 'T1', completed_steps=3)
        _active_session(session_repo, 'CHG-T1')

        summary = SagaRecoveryJob(older_than_seconds=300).execute()

        assert summary['completed'] == 1
        assert session_repo.find_by_charge_id('CHG-T1').status is SessionStatus.ACTIVE
        assert saga_repo.find_by_transaction_id('T1').status is SagaStatus.COMPLETED

    def test_ignores_recent_and_finished_sagas(self, app_context, saga_repo):
        _stuck_saga(saga_repo, 'RECENT', completed_steps=1, minutes_ago=1)
        _stuck_saga(saga_repo, 'DONE', completed_steps=3, status=SagaStatus.COMPLETED)

        summary = SagaRecoveryJob(older_than_seconds=300).execute()

        assert summary == {'completed': 0, 'compensated': 0, 'failed': 0}
        assert saga_repo.find_by_transaction_id('RECENT').status is SagaStatus.IN_PROGRESS


class TestSagaLogCleanupJob:

    def test_deletes_only_old_finished_logs(self, app_context, saga_repo):
        _stuck_saga(saga_repo, 'OLD-DONE', completed_steps=3, minutes_ago=60 * 24 * 31, status=SagaStatus.COMPLETED)
        _stuck_saga(saga_repo, 'OLD-FAILED', completed_steps=1, minutes_ago=60 * 24 * 31, status=SagaStatus.FAILED)
        _stuck_saga(saga_repo, 'NEW-DONE', completed_steps=3, status=SagaStatus.COMPLETED)

        assert SagaLogCleanupJob(retention_days=30).execute() == 1
        assert saga_repo.find_by_transaction_id('OLD-DONE') is None
        assert saga_repo.find_by_transaction_id('OLD-FAILED') is not None
