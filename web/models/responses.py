"""
응답 스키마 (Pydantic)

도구 엔드포인트는 모두 ToolResult 봉투로 응답
"""

from datetime import datetime

from pydantic import BaseModel, Field

from core.errors import LedgerError


class ToolResult(BaseModel):
    """도구 응답 봉투

    검증/조회/충돌 오류도 ok=False 메시지로 응답 (HTTP 200).
    """

    ok: bool = Field(default=True, description="성공 여부")
    text: str = Field(..., description="사람이 읽을 수 있는 결과 메시지")
    error_type: str | None = Field(default=None, description="오류 분류 (NotFound, AlreadyPosted 등)")

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, error: LedgerError, prefix: str | None = None) -> "ToolResult":
        text = f"{prefix}: {error}" if prefix else str(error)
        return cls(ok=False, text=text, error_type=error.error_type)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="API 버전")
    database: str = Field(..., description="DB 종류 (memory/file)")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")
