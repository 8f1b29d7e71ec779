"""
Services package
비즈니스 로직을 처리하는 서비스 레이어

- account_service: 잔액 / 웰컴 보너스 / 통계 / 리더보드
- charging_service: 충전 예약 사가 및 세션 관리
- p2p_service: P2P 주문 생성 / 체결
- market_service: 리워드 토큰 구매
- health_service: 의존성 상태 점검
"""

__all__ = []
