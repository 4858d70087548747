"""
복식부기 스키마 초기화

Web 시작 시 자동으로 Ledger 테이블, View, 트리거 생성.
CREATE IF NOT EXISTS / DROP ... IF EXISTS 패턴으로 안전하게 동작.

전기 시 균형, 라인 번호 자동 부여, 잔액 반영, 보고서 스냅샷은
엔진 코드의 트랜잭션 안에서 처리한다.
전기된 분개의 불변성은 트리거로도 막아서 원시 쿼리로도 깨지지 않는다.
"""

import logging
import textwrap
from typing import TYPE_CHECKING

from core.ledger.types import ALL_ACCOUNT_TAGS, BalanceSheetCategory, BalanceSheetClassification
from core.storage.config_store import init_default_user_config
from core.types import ConfigKey, ReportType

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.config.loader import LedgerDefaults

logger = logging.getLogger(__name__)


def _sql_in_list(values: list[str] | tuple[str, ...]) -> str:
    """CHECK (... IN (...))용 문자열 목록"""
    return ", ".join("'" + value.replace("'", "''") + "'" for value in values)


TABLES: dict[str, str] = {
    "user_config": f"""
        CREATE TABLE IF NOT EXISTS user_config (
            key              TEXT PRIMARY KEY CHECK (key IN ({_sql_in_list([k.value for k in ConfigKey])})),
            value            TEXT NOT NULL,
            description      TEXT,
            created_at       INTEGER NOT NULL,
            updated_at       INTEGER NOT NULL
        )
    """,
    "account": """
        CREATE TABLE IF NOT EXISTS account (
            code                 INTEGER PRIMARY KEY,
            name                 TEXT NOT NULL UNIQUE,
            normal_balance       TEXT NOT NULL CHECK (normal_balance IN ('debit', 'credit')),
            balance              INTEGER NOT NULL DEFAULT 0,
            is_active            INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0, 1)),
            is_posting_account   INTEGER NOT NULL DEFAULT 1 CHECK (is_posting_account IN (0, 1)),
            control_account_code INTEGER REFERENCES account (code),
            created_at           INTEGER NOT NULL,
            updated_at           INTEGER NOT NULL,
            CHECK (control_account_code IS NULL OR control_account_code != code)
        )
    """,
    "account_tag": f"""
        CREATE TABLE IF NOT EXISTS account_tag (
            account_code     INTEGER NOT NULL REFERENCES account (code),
            tag              TEXT NOT NULL CHECK (tag IN ({_sql_in_list(ALL_ACCOUNT_TAGS)})),
            PRIMARY KEY (account_code, tag)
        )
    """,
    "journal_entry": """
        CREATE TABLE IF NOT EXISTS journal_entry (
            ref              INTEGER PRIMARY KEY AUTOINCREMENT,
            entry_time       INTEGER NOT NULL CHECK (entry_time > 0),
            note             TEXT,
            post_time        INTEGER,
            reversal_of_ref  INTEGER REFERENCES journal_entry (ref),
            reversed_by_ref  INTEGER REFERENCES journal_entry (ref),
            idempotent_key   TEXT,
            created_at       INTEGER NOT NULL
        )
    """,
    "journal_entry_line": """
        CREATE TABLE IF NOT EXISTS journal_entry_line (
            journal_entry_ref INTEGER NOT NULL REFERENCES journal_entry (ref),
            line_number       INTEGER NOT NULL,
            account_code      INTEGER NOT NULL REFERENCES account (code),
            debit             INTEGER NOT NULL DEFAULT 0,
            credit            INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (journal_entry_ref, line_number),
            CHECK (debit >= 0 AND credit >= 0 AND (debit = 0 OR credit = 0)),
            CHECK (debit > 0 OR credit > 0)
        )
    """,
    "balance_report": f"""
        CREATE TABLE IF NOT EXISTS balance_report (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            report_time      INTEGER NOT NULL,
            report_type      TEXT NOT NULL DEFAULT 'Period End'
                             CHECK (report_type IN ({_sql_in_list([t.value for t in ReportType])})),
            name             TEXT,
            created_at       INTEGER NOT NULL
        )
    """,
    "trial_balance_line": """
        CREATE TABLE IF NOT EXISTS trial_balance_line (
            balance_report_id INTEGER NOT NULL REFERENCES balance_report (id),
            account_code      INTEGER NOT NULL REFERENCES account (code),
            debit             INTEGER NOT NULL,
            credit            INTEGER NOT NULL,
            PRIMARY KEY (balance_report_id, account_code),
            CHECK (debit >= 0 AND credit >= 0)
        )
    """,
    "balance_sheet_line": f"""
        CREATE TABLE IF NOT EXISTS balance_sheet_line (
            balance_report_id INTEGER NOT NULL REFERENCES balance_report (id),
            account_code      INTEGER NOT NULL REFERENCES account (code),
            classification    TEXT NOT NULL
                              CHECK (classification IN ({_sql_in_list([c.value for c in BalanceSheetClassification])})),
            category          TEXT NOT NULL
                              CHECK (category IN ({_sql_in_list([c.value for c in BalanceSheetCategory])})),
            amount            INTEGER NOT NULL,
            PRIMARY KEY (balance_report_id, account_code)
        )
    """,
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_account_control ON account(control_account_code) WHERE control_account_code IS NOT NULL",
    "CREATE INDEX IF NOT EXISTS idx_account_active ON account(is_active, code)",
    "CREATE INDEX IF NOT EXISTS idx_account_tag_tag ON account_tag(tag, account_code)",
    "CREATE INDEX IF NOT EXISTS idx_journal_entry_time ON journal_entry(entry_time)",
    "CREATE INDEX IF NOT EXISTS idx_journal_entry_post_time ON journal_entry(post_time) WHERE post_time IS NOT NULL",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_journal_entry_idempotent_key ON journal_entry(idempotent_key) WHERE idempotent_key IS NOT NULL",
    "CREATE INDEX IF NOT EXISTS idx_journal_entry_line_account ON journal_entry_line(account_code, journal_entry_ref)",
    "CREATE INDEX IF NOT EXISTS idx_balance_report_time ON balance_report(report_time, id)",
]

VIEWS: dict[str, str] = {
    # 보고서별 시산표 (계정명, 정상 잔액 포함)
    "trial_balance": """
        CREATE VIEW trial_balance AS
        SELECT
            br.id AS balance_report_id,
            br.report_time,
            br.report_type,
            br.name,
            tbl.account_code,
            a.name AS account_name,
            a.normal_balance,
            tbl.debit,
            tbl.credit
        FROM balance_report br
        JOIN trial_balance_line tbl ON tbl.balance_report_id = br.id
        JOIN account a ON a.code = tbl.account_code
    """,
    # 보고서별 재무상태표
    "balance_sheet": """
        CREATE VIEW balance_sheet AS
        SELECT
            br.id AS balance_report_id,
            br.report_time,
            br.report_type,
            br.name,
            bsl.classification,
            bsl.category,
            bsl.account_code,
            a.name AS account_name,
            bsl.amount
        FROM balance_report br
        JOIN balance_sheet_line bsl ON bsl.balance_report_id = br.id
        JOIN account a ON a.code = bsl.account_code
    """,
    # 전기된 분개 라인 (계정명 포함)
    "journal_entry_summary": """
        CREATE VIEW journal_entry_summary AS
        SELECT
            je.ref,
            je.entry_time,
            je.note,
            je.post_time,
            je.reversal_of_ref,
            je.reversed_by_ref,
            jel.line_number,
            jel.account_code,
            a.name AS account_name,
            jel.debit,
            jel.credit
        FROM journal_entry_line jel
        JOIN journal_entry je ON je.ref = jel.journal_entry_ref
        JOIN account a ON a.code = jel.account_code
        WHERE je.post_time IS NOT NULL
    """,
}

TRIGGERS: dict[str, str] = {
    # 전기된 분개 삭제 금지
    "journal_entry_delete_prevention_trigger": """
        CREATE TRIGGER journal_entry_delete_prevention_trigger
        BEFORE DELETE ON journal_entry FOR EACH ROW
        WHEN old.post_time IS NOT NULL
        BEGIN
            SELECT RAISE(ABORT, 'Cannot delete posted journal entry');
        END
    """,
    # 전기 취소 및 전기된 분개의 일자/적요 변경 금지 (역분개 상호 참조는 허용)
    "journal_entry_posted_update_prevention_trigger": """
        CREATE TRIGGER journal_entry_posted_update_prevention_trigger
        BEFORE UPDATE OF post_time, entry_time, note ON journal_entry FOR EACH ROW
        WHEN old.post_time IS NOT NULL
            AND (new.post_time IS NOT old.post_time
                 OR new.entry_time IS NOT old.entry_time
                 OR new.note IS NOT old.note)
        BEGIN
            SELECT RAISE(ABORT, 'Cannot modify posted journal entry');
        END
    """,
    "journal_entry_line_insert_prevention_trigger": """
        CREATE TRIGGER journal_entry_line_insert_prevention_trigger
        BEFORE INSERT ON journal_entry_line FOR EACH ROW
        WHEN (SELECT post_time FROM journal_entry WHERE ref = new.journal_entry_ref) IS NOT NULL
        BEGIN
            SELECT RAISE(ABORT, 'Cannot add lines to posted journal entry');
        END
    """,
    "journal_entry_line_update_prevention_trigger": """
        CREATE TRIGGER journal_entry_line_update_prevention_trigger
        BEFORE UPDATE ON journal_entry_line FOR EACH ROW
        WHEN (SELECT post_time FROM journal_entry WHERE ref = old.journal_entry_ref) IS NOT NULL
            OR (SELECT post_time FROM journal_entry WHERE ref = new.journal_entry_ref) IS NOT NULL
        BEGIN
            SELECT RAISE(ABORT, 'Cannot modify lines of posted journal entry');
        END
    """,
    "journal_entry_line_delete_prevention_trigger": """
        CREATE TRIGGER journal_entry_line_delete_prevention_trigger
        BEFORE DELETE ON journal_entry_line FOR EACH ROW
        WHEN (SELECT post_time FROM journal_entry WHERE ref = old.journal_entry_ref) IS NOT NULL
        BEGIN
            SELECT RAISE(ABORT, 'Cannot delete lines of posted journal entry');
        END
    """,
}


async def init_ledger_schema(
    db: "SQLiteAdapter",
    defaults: "LedgerDefaults | None" = None,
) -> None:
    """Ledger 스키마 초기화 (테이블 + View + 사용자 설정 기본값)

    Web 시작 시 호출되어 필요한 모든 테이블과 View를 생성.
    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
        defaults: user_config 기본값 (None이면 LedgerDefaults 기본값)
    """
    await _create_ledger_tables(db)
    await _create_ledger_views(db)
    await _create_ledger_triggers(db)
    await init_default_user_config(db, defaults)
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 및 인덱스 생성"""
    for ddl in TABLES.values():
        await db.execute(ddl)

    for ddl in INDEXES:
        await db.execute(ddl)

    await db.commit()
    logger.debug("Ledger 테이블 생성 완료")


async def _create_ledger_views(db: "SQLiteAdapter") -> None:
    """Ledger View 재생성"""
    for name, ddl in VIEWS.items():
        await db.execute(f"DROP VIEW IF EXISTS {name}")
        await db.execute(ddl)

    await db.commit()
    logger.debug("Ledger View 생성 완료")


async def _create_ledger_triggers(db: "SQLiteAdapter") -> None:
    """전기 분개 보호 트리거 재생성"""
    for name, ddl in TRIGGERS.items():
        await db.execute(f"DROP TRIGGER IF EXISTS {name}")
        await db.execute(ddl)

    await db.commit()
    logger.debug("Ledger 트리거 생성 완료")


def _dedent(ddl: str) -> str:
    return textwrap.dedent(ddl).strip() + ";"


def get_schema_reference() -> str:
    """클라이언트 쿼리 작성용 스키마 참조 문서

    모든 테이블/인덱스/View의 DDL. 금액은 최소 통화 단위 정수,
    시간은 UTC 밀리초 타임스탬프.
    """
    parts = [
        "-- Ledger schema reference (SQLite)",
        "-- Amounts are integers in the smallest currency unit.",
        "-- Times are Unix epoch milliseconds (UTC). journal_entry.post_time IS NULL means draft.",
        "",
        "-- Tables",
    ]
    parts.extend(_dedent(ddl) + "\n" for ddl in TABLES.values())
    parts.append("-- Indexes")
    parts.extend(ddl + ";" for ddl in INDEXES)
    parts.append("")
    parts.append("-- Views")
    parts.extend(_dedent(ddl) + "\n" for ddl in VIEWS.values())
    parts.append("-- Triggers (posted journal entries are immutable)")
    parts.extend(_dedent(ddl) + "\n" for ddl in TRIGGERS.values())
    return "\n".join(parts)
