class ReportError(Exception):
    """보고서 내보내기 파이프라인 공통 예외 (모두 현재 요청에서 종료, 내부 재시도 없음)"""

    code = "REPORT_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidScope(ReportError):
    code = "INVALID_SCOPE"
    status_code = 400


class InvalidDateRange(ReportError):
    code = "INVALID_DATE_RANGE"
    status_code = 400


class TeacherNotFound(ReportError):
    code = "TEACHER_NOT_FOUND"
    status_code = 404


class DataSourceError(ReportError):
    """DB 조회 실패. 원본 메시지를 그대로 보존 (호출 측에서 재시도 가능)"""
    code = "DATA_SOURCE_ERROR"
    status_code = 503


class RenderError(ReportError):
    code = "RENDER_ERROR"
    status_code = 502


class RenderTimeout(ReportError):
    code = "RENDER_TIMEOUT"
    status_code = 504


class PackagingError(ReportError):
    code = "PACKAGING_ERROR"
    status_code = 500
