import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logger(app=None, log_level=None, log_to_file=True):
    if log_level is None:
        log_level = logging.INFO

    #NOTE: 서비스 모듈들은 get_logger()로 'dewatt.*' 로거를 쓰므로 앱 로거와 함께 설정한다
    base_logger = logging.getLogger('dewatt')
    targets = [base_logger]
    if app:
        targets.insert(0, app.logger)

    for target in targets:
        target.setLevel(log_level)

    logger = targets[0]
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt='[%(asctime)s] %(levelname)s in %(name)s (%(filename)s:%(lineno)d): %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    #NOTE: 콘솔 핸들러 - stdout으로 출력
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_to_file:
        #NOTE: 파일 핸들러 - 10MB 단위로 로테이션, 최대 5개 파일
        log_dir = Path('logs')
        log_dir.mkdir(exist_ok=True)

        file_handler = RotatingFileHandler(
            log_dir / 'dewatt.log',
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)

        #NOTE: 에러 로그 별도 파일 저장
        error_handler = RotatingFileHandler(
            log_dir / 'error.log',
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)

        handlers.extend([file_handler, error_handler])

    for target in targets:
        if target.handlers:
            continue
        for handler in handlers:
            target.addHandler(handler)

    return logger


def get_logger(name=None):
    if name:
        return logging.getLogger(f'dewatt.{name}')
    return logging.getLogger('dewatt')
