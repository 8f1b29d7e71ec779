"""
Models package
MongoDB 콜렉션 스키마

MongoDB Collections (one model per file):
- Account: 지갑별 잔액 (fiat / reward token), 누적 충전량, CO2 절감량
- ChargingSession: 충전 세션 (active -> completed | cancelled)
- P2POrder: P2P 토큰 주문
- SagaTransactionLog: 사가 실행 로그 (감사/복구용)
"""
