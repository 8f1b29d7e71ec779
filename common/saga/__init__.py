"""
사가 패턴 (Saga Pattern) 모듈

원장 기록 -> 세션 저장 -> 잔액 반영처럼 하나의 트랜잭션으로 묶을 수 없는
여러 단계 작업을 보상 트랜잭션으로 정리하기 위한 사가 패턴
"""

from .saga_orchestrator import SagaOrchestrator, SagaContext, SagaStepDefinition

__all__ = [
    'SagaOrchestrator',
    'SagaContext',
    'SagaStepDefinition'
]
