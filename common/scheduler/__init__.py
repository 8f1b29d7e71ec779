"""
사가 복구 / 로그 정리 백그라운드 작업 스케줄러
"""
from flask import Flask
from common.extensions import scheduler
from common.utils.logging_utils import get_logger

logger = get_logger('scheduler')


def init_scheduler(app: Flask):
    #NOTE: 관리용 REST API는 노출하지 않음, 작업 시각은 UTC 기준
    app.config.setdefault('SCHEDULER_API_ENABLED', False)
    app.config.setdefault('SCHEDULER_TIMEZONE', 'UTC')

    scheduler.init_app(app)

    from common.scheduler.tasks import register_scheduled_tasks
    register_scheduled_tasks()

    if scheduler.running:
        logger.warning("Scheduler already running, skipping start")
        return

    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


__all__ = ['init_scheduler']
