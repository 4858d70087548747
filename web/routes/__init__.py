"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- accounts: 계정 관리, 태그, 계정과목표
- journal: 분개 초안/전기/역분개
- reports: 시산표/재무상태표
- query: 원시 SQL, 스키마/태그 리소스
- config: 사용자 설정
"""
