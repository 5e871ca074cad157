import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """응답 헤더에 X-Latency-Ms 추가 + 느린 요청(보고서 렌더링 등) 로그"""

    def __init__(self, app, slow_ms: int = 5000):
        super().__init__(app)
        self.slow_ms = slow_ms

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        if latency_ms >= self.slow_ms:
            logger.warning(f"느린 요청: {request.method} {request.url.path} {latency_ms}ms")
        return response
