"""
Journal 라우트

분개 생명주기 도구 API (초안 → 전기 → 역분개)
"""

from fastapi import APIRouter, Body, Depends, Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.dependencies import get_db
from web.models.requests import (
    DeleteDraftsRequest,
    DraftJournalEntryRequest,
    PostJournalEntryRequest,
    ReverseJournalEntryRequest,
    UpdateJournalEntryRequest,
)
from web.models.responses import ToolResult
from web.services.journal_service import JournalService

router = APIRouter(prefix="/api/journal-entries", tags=["Journal"])


@router.post("", response_model=ToolResult)
async def draft_journal_entry(
    request: DraftJournalEntryRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """분개 초안 작성"""
    return await JournalService(db).draft_journal_entry(request)


@router.post("/delete-drafts", response_model=ToolResult)
async def delete_journal_entry_drafts(
    request: DeleteDraftsRequest,
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """초안 일괄 삭제 (전기된 분개는 건너뜀)"""
    return await JournalService(db).delete_journal_entry_drafts(request.refs)


@router.get("/{ref}", response_model=ToolResult)
async def get_journal_entry(
    ref: int = Path(..., description="분개 ref"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """분개 조회"""
    return await JournalService(db).get_journal_entry(ref)


@router.put("/{ref}", response_model=ToolResult)
async def update_journal_entry(
    request: UpdateJournalEntryRequest,
    ref: int = Path(..., description="분개 ref"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """분개 초안 수정"""
    return await JournalService(db).update_journal_entry(ref, request)


@router.post("/{ref}/post", response_model=ToolResult)
async def post_journal_entry(
    ref: int = Path(..., description="분개 ref"),
    request: PostJournalEntryRequest | None = Body(default=None),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """분개 전기 (본문 생략 시 현재 시각)"""
    date = request.date if request is not None else None
    return await JournalService(db).post_journal_entry(ref, date)


@router.post("/{ref}/reverse", response_model=ToolResult)
async def reverse_journal_entry(
    request: ReverseJournalEntryRequest,
    ref: int = Path(..., description="원 분개 ref"),
    db: SQLiteAdapter = Depends(get_db),
) -> ToolResult:
    """역분개 초안 생성"""
    return await JournalService(db).reverse_journal_entry(ref, request)
