import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from schemas.common import ErrorDetail, ErrorResponse
from services.report_errors import ReportError

logger = logging.getLogger(__name__)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content={"success": False, **body.model_dump(mode="json")})


def add_error_handlers(app: FastAPI):
    # ✅ 보고서 파이프라인 예외 → 종류별 상태 코드 + 에러 코드
    @app.exception_handler(ReportError)
    async def report_error_handler(request: Request, exc: ReportError):
        return error_response(exc.status_code, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 오류: {request.method} {request.url.path}")
        return error_response(500, "INTERNAL_ERROR", str(exc))
