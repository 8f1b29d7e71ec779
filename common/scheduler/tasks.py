"""
스케줄 작업 정의 및 등록
- 멈춘 충전 예약 사가 복구
- 오래된 사가 로그 정리
- 메모리 키-값 저장소의 만료 키 정리 (Redis 미사용 시)
"""

import common.extensions as extensions
from common.cache.key_value_store import MemoryKeyValueStore
from common.extensions import scheduler
from common.scheduler.jobs import SagaRecoveryJob, SagaLogCleanupJob, KeyValuePurgeJob
from common.utils.logging_utils import get_logger

logger = get_logger('scheduler_tasks')


def register_scheduled_tasks():
    """
    모든 스케줄 작업을 등록하는 함수
    """
    # 5분마다 멈춘 예약 사가 복구
    scheduler.add_job(
        id='recover_stuck_booking_sagas',
        func=execute_saga_recovery_job,
        trigger='interval',
        minutes=5,
        replace_existing=True
    )

    # 매일 새벽 4시에 오래된 사가 로그 삭제
    scheduler.add_job(
        id='cleanup_saga_logs',
        func=execute_saga_log_cleanup_job,
        trigger='cron',
        hour=4,
        minute=0,
        replace_existing=True
    )

    logger.info("예약 사가 복구: 5분 간격")
    logger.info("사가 로그 정리: 매일 04:00")

    #NOTE: Redis는 키 만료를 자체 처리하므로 메모리 저장소일 때만 등록
    if isinstance(extensions.kv_store, MemoryKeyValueStore):
        interval = scheduler.app.config['KV_PURGE_INTERVAL_SECONDS']
        scheduler.add_job(
            id='purge_expired_kv_keys',
            func=execute_kv_purge_job,
            trigger='interval',
            seconds=interval,
            replace_existing=True
        )
        logger.info(f"만료 키 정리: {interval}초 간격")

    logger.info("모든 스케줄 작업이 등록되었습니다.")


def execute_saga_recovery_job():
    """예약 사가 복구 Job 실행 (Flask 앱 컨텍스트 내에서)"""
    with scheduler.app.app_context():
        try:
            job = SagaRecoveryJob(older_than_seconds=scheduler.app.config['SAGA_RECOVERY_AGE_SECONDS'])
            job.execute()
        except Exception as e:
            logger.error(f"예약 사가 복구 작업 실패: {str(e)}", exc_info=True)


def execute_saga_log_cleanup_job():
    """사가 로그 정리 Job 실행 (Flask 앱 컨텍스트 내에서)"""
    with scheduler.app.app_context():
        try:
            logger.info("사가 로그 정리 작업 시작")
            job = SagaLogCleanupJob(retention_days=scheduler.app.config['SAGA_LOG_RETENTION_DAYS'])
            job.execute()
            logger.info("사가 로그 정리 작업 완료")
        except Exception as e:
            logger.error(f"사가 로그 정리 작업 실패: {str(e)}", exc_info=True)


def execute_kv_purge_job():
    try:
        KeyValuePurgeJob().execute()
    except Exception as e:
        logger.error(f"만료 키 정리 작업 실패: {str(e)}", exc_info=True)
