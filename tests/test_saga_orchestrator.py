import pytest

from app.models.mongodb.saga_transaction_log import SagaTransactionLogRepository, SagaStatus, StepStatus
from common.saga import SagaOrchestrator


@pytest.fixture
def saga_repo(mongo_db):
    return SagaTransactionLogRepository(mongo_db)


def _statuses(saga_repo, transaction_id):
    saga_log = saga_repo.find_by_transaction_id(transaction_id)
    return saga_log.status, [step.status for step in saga_log.steps]


class TestSagaOrchestrator:

    def test_runs_steps_in_order_and_shares_results(self, saga_repo):
        calls = []
        saga = SagaOrchestrator(saga_repo, metadata={'type': 'test'})
        saga.add_step('first', lambda ctx: calls.append('first') or 1)
        saga.add_step('second', lambda ctx: calls.append('second') or ctx.get_result('first') + 1)

        success, error = saga.execute()

        assert (success, error) == (True, None)
        assert calls == ['first', 'second']
        assert saga.context.get_result('second') == 2
        assert _statuses(saga_repo, saga.transaction_id) == (
            SagaStatus.COMPLETED, [StepStatus.COMPLETED, StepStatus.COMPLETED]
        )

    def test_failure_compensates_executed_steps_in_reverse(self, saga_repo):
        compensated = []
        boom = ValueError('boom')

        def fail(ctx):
            raise boom

        saga = SagaOrchestrator(saga_repo)
        saga.add_step('a', lambda ctx: 'A', compensate=lambda data: compensated.append(data['name']),
                      extract_compensation_data=lambda result: {'name': result})
        saga.add_step('b', lambda ctx: 'B', compensate=lambda data: compensated.append(data['name']),
                      extract_compensation_data=lambda result: {'name': result})
        saga.add_step('c', fail, compensate=lambda data: compensated.append('c'))

        success, error = saga.execute()

        assert success is False
        assert error is boom
        assert compensated == ['B', 'A']
        assert _statuses(saga_repo, saga.transaction_id) == (
            SagaStatus.COMPENSATED, [StepStatus.COMPENSATED, StepStatus.COMPENSATED, StepStatus.FAILED]
        )

    def test_steps_without_compensation_are_skipped(self, saga_repo):
        saga = SagaOrchestrator(saga_repo)
        saga.add_step('record', lambda ctx: 'sig')
        saga.add_step('fail', lambda ctx: 1 / 0)

        success, error = saga.execute()

        assert success is False
        assert isinstance(error, ZeroDivisionError)
        assert _statuses(saga_repo, saga.transaction_id) == (
            SagaStatus.COMPENSATED, [StepStatus.COMPLETED, StepStatus.FAILED]
        )

    def test_failed_compensation_marks_saga_failed_without_raising(self, saga_repo):
        def broken_compensation(data):
            raise RuntimeError('db down')

        saga = SagaOrchestrator(saga_repo)
        saga.add_step('create', lambda ctx: 'x', compensate=broken_compensation)
        saga.add_step('fail', lambda ctx: 1 / 0)

        success, _ = saga.execute()

        saga_log = saga_repo.find_by_transaction_id(saga.transaction_id)
        assert success is False
        assert saga_log.status is SagaStatus.FAILED
        assert 'compensation failed' in saga_log.steps[0].error_message
