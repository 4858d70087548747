"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountInputRequest,
    AccountSearchRequest,
    AccountTagsRequest,
    ConfigItem,
    DeleteDraftsRequest,
    DraftJournalEntryRequest,
    EnsureAccountsRequest,
    JournalLineRequest,
    PostJournalEntryRequest,
    RawQueryRequest,
    RenameAccountRequest,
    ReverseJournalEntryRequest,
    SetConfigRequest,
    SetControlAccountRequest,
    TaggedAccount,
    UpdateAccountRequest,
    UpdateJournalEntryRequest,
)
from web.models.responses import HealthResponse, ToolResult

__all__ = [
    # Requests
    "AccountInputRequest",
    "EnsureAccountsRequest",
    "RenameAccountRequest",
    "SetControlAccountRequest",
    "UpdateAccountRequest",
    "AccountSearchRequest",
    "TaggedAccount",
    "AccountTagsRequest",
    "JournalLineRequest",
    "DraftJournalEntryRequest",
    "UpdateJournalEntryRequest",
    "PostJournalEntryRequest",
    "DeleteDraftsRequest",
    "ReverseJournalEntryRequest",
    "RawQueryRequest",
    "ConfigItem",
    "SetConfigRequest",
    # Responses
    "ToolResult",
    "HealthResponse",
]
