from enum import Enum

class APIError(Enum):
    # 1. 공통 에러
    INTERNAL_SERVER_ERROR = ("C001", "서버 내부 오류가 발생했습니다.", 500)
    INVALID_INPUT_VALUE  = ("C002", "입력값이 올바르지 않습니다.", 400)
    DB_ERROR = ("C003", "DB 작업 처리 중 오류가 발생하였습니다.", 500)
    RATE_LIMIT_EXCEEDED = ("C004", "요청이 너무 많습니다. 잠시 후 다시 시도해주세요.", 429)
    RESOURCE_NOT_FOUND = ("C005", "요청한 리소스를 찾을 수 없습니다.", 404)

    # 2. 계정(Account) 관련
    INVALID_WALLET        = ("U001", "유효하지 않은 지갑 주소입니다.", 400)
    USER_NOT_FOUND        = ("U002", "사용자를 찾을 수 없습니다.", 404)
    INSUFFICIENT_BALANCE  = ("U003", "잔액이 부족합니다.", 400)
    INSUFFICIENT_TOKENS   = ("U004", "토큰 잔액이 부족합니다.", 400)
    BONUS_ALREADY_CLAIMED = ("U005", "이미 웰컴 보너스를 수령했습니다.", 400)
    BONUS_DISABLED        = ("U006", "웰컴 보너스가 비활성화되어 있습니다.", 403)

    # 3. 충전(Charging) 관련
    SESSION_NOT_FOUND     = ("S001", "충전 세션을 찾을 수 없거나 이미 종료되었습니다.", 404)
    SESSION_DUPLICATE     = ("S002", "이미 존재하는 충전 세션입니다.", 409)
    BOOKING_FAILED        = ("S003", "충전 예약 처리에 실패했습니다.", 500)

    # 4. P2P 주문 관련
    ORDER_NOT_FOUND       = ("P001", "주문을 찾을 수 없거나 이미 체결되었습니다.", 404)
    ORDER_SELF_EXECUTION  = ("P002", "자신의 주문은 체결할 수 없습니다.", 400)

    def __init__(self, code, message, status):
        self.code = code
        self.message = message
        self.status = status
