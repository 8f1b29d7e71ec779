from types import SimpleNamespace

import pytest

import common.extensions as extensions
import common.scheduler.tasks as tasks
from common.cache.key_value_store import MemoryKeyValueStore, RedisKeyValueStore
from common.scheduler.jobs import KeyValuePurgeJob


class FakeScheduler:
    """add_job 호출만 기록하는 스케줄러"""

    def __init__(self, config):
        self.app = SimpleNamespace(config=config)
        self.jobs = {}

    def add_job(self, id, func, trigger, replace_existing=False, **kwargs):
        self.jobs[id] = {'func': func, 'trigger': trigger, **kwargs}


@pytest.fixture
def fake_scheduler(app, monkeypatch):
    scheduler = FakeScheduler(app.config)
    monkeypatch.setattr(tasks, 'scheduler', scheduler)
    return scheduler


class TestRegisterScheduledTasks:

    def test_memory_store_gets_a_purge_job(self, fake_scheduler):
        tasks.register_scheduled_tasks()

        assert set(fake_scheduler.jobs) == {
            'recover_stuck_booking_sagas',
            'cleanup_saga_logs',
            'purge_expired_kv_keys'
        }
        purge = fake_scheduler.jobs['purge_expired_kv_keys']
        assert purge['trigger'] == 'interval'
        assert purge['seconds'] == 60

    def test_redis_store_skips_the_purge_job(self, fake_scheduler, monkeypatch):
        monkeypatch.setattr(extensions, 'kv_store', RedisKeyValueStore(client=None))

        tasks.register_scheduled_tasks()

        assert 'purge_expired_kv_keys' not in fake_scheduler.jobs


class TestKeyValuePurgeJob:

    def test_drops_expired_rate_limit_windows(self, clock):
        store = MemoryKeyValueStore(clock=clock)
        for n in range(5):
            store.incr_window(f'dewatt:ratelimit:ip:10.0.0.{n}', 60)
        store.set('dewatt:balance:kept', '{}')

        clock.advance(61)

        assert KeyValuePurgeJob(store).execute() == 5
        assert store.size() == 1

    def test_uses_the_shared_store(self, app, kv_store, clock):
        kv_store.set('short', '1', ttl=1)
        clock.advance(2)

        assert KeyValuePurgeJob().execute() == 1
        assert kv_store.size() == 0

    def test_ignores_redis_store(self):
        assert KeyValuePurgeJob(RedisKeyValueStore(client=None)).execute() == 0
