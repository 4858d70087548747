"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.errors import StorageFailure
from core.ledger.schema import init_ledger_schema
from core.logging import setup_logging
from web.models.responses import ToolResult
from web.routes import accounts, config, health, journal, query, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리

    시작 시 공유 DB 연결 + Ledger 스키마 자동 초기화, 종료 시 연결 정리.
    """
    settings = get_settings()
    setup_logging("web", settings.log_level, settings.log_level)

    db = SQLiteAdapter(settings.db_path)
    await db.connect()
    await init_ledger_schema(db, settings.ledger_defaults)
    app.state.db = db

    if db.is_memory:
        logger.warning("인메모리 DB 사용 중: 프로세스 종료 시 장부 데이터가 사라집니다")

    try:
        yield
    finally:
        await db.close()


app = FastAPI(
    title="Ledger API",
    description="복식부기 장부 도구 API",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure) -> JSONResponse:
    """저장소 장애는 503 + 동일 봉투로 응답"""
    logger.error(
        "저장소 장애",
        extra={"path": request.url.path, "error": str(exc)},
    )
    result = ToolResult(ok=False, text=f"Storage failure: {exc}", error_type=exc.error_type)
    return JSONResponse(status_code=503, content=result.model_dump())


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(journal.router)
app.include_router(reports.router)
app.include_router(query.router)
app.include_router(config.router)
