"""
Web 서비스 패키지

도구 로직 처리 (장부 예외 → ToolResult 메시지 변환)
"""

from web.services.account_service import AccountService
from web.services.config_service import ConfigService
from web.services.journal_service import JournalService
from web.services.query_service import QueryService
from web.services.report_service import ReportService

__all__ = [
    "AccountService",
    "JournalService",
    "ReportService",
    "QueryService",
    "ConfigService",
]
