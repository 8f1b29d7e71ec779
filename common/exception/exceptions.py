from common.enum.error_code import APIError

class BusinessError(Exception):
    def __init__(self, error_enum: APIError, message=None, data=None):
        self.error_enum = error_enum
        self.message = message if message else error_enum.message
        # NOTE: 응답 바디에 함께 내려줄 부가 필드 (charge_id, shortfall 등)
        self.data = dict(data) if data else {}
        super().__init__(self.message)
