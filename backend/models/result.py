from pydantic import BaseModel
from typing import Any, Optional

SUCCESS_CODE = 200
SUCCESS_MESSAGE = "success"


class ApiResult(BaseModel):
    """Envelope returned by every comment operation and route."""
    code: int
    message: str
    data: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE

    @classmethod
    def success(cls, data: Any = None) -> "ApiResult":
        return cls(code=SUCCESS_CODE, message=SUCCESS_MESSAGE, data=data)

    @classmethod
    def error(cls, code: int, message: str) -> "ApiResult":
        return cls(code=code, message=message)
