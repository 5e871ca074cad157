"""
services/report_export.py

- 보고서 내보내기 오케스트레이션
  요청 검증 → 집계(Aggregator) → 렌더링(Renderer) → [portfolio + raw] 패키징(Packager)
- 결과는 전부 메모리에 만든 뒤 돌려주므로 부분 출력은 없습니다.
- 파이프라인 전체가 읽기 전용/멱등이라 실패 시 요청 단위로 그대로 재시도하면 됩니다.
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from schemas.reports import DateRange, ReportScope
from services.report_aggregator import ReportAggregator
from services.report_errors import ReportError
from services.report_packager import ReportPackager
from services.report_renderer import ReportRenderer

logger = logging.getLogger(__name__)

INCLUDE_OPTIONS = {"charts", "raw"}


def parse_include(include: Optional[str]) -> frozenset:
    """'charts', 'raw', 'charts,raw' → 옵션 집합. 값이 없으면 차트 포함"""
    if include is None:
        return frozenset({"charts"})
    tokens = {t.strip().lower() for t in include.split(",") if t.strip()}
    unknown = tokens - INCLUDE_OPTIONS
    if unknown:
        raise ValueError(f"지원하지 않는 include 값: {', '.join(sorted(unknown))}")
    return frozenset(tokens)


def _slug(text: str) -> str:
    ascii_text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^A-Za-z0-9]+", "_", ascii_text).strip("_") or "teacher"


def build_filename(teacher_name: str, scope: ReportScope, timestamp: datetime, extension: str) -> str:
    """교원 이름 + 범위 + 초 단위 시각. 같은 초에 같은 요청이면 이름이 겹칠 수 있음"""
    return f"{_slug(teacher_name)}_{scope.value}_report_{timestamp.strftime('%Y%m%d_%H%M%S')}.{extension}"


@dataclass(frozen=True)
class ExportRequest:
    teacher_id: int
    scope: ReportScope
    include: frozenset = frozenset({"charts"})
    date_range: DateRange = DateRange()

    @property
    def include_charts(self) -> bool:
        return "charts" in self.include

    @property
    def wants_archive(self) -> bool:
        # raw 데이터는 portfolio 범위에서만 의미가 있음
        return self.scope is ReportScope.PORTFOLIO and "raw" in self.include


@dataclass(frozen=True)
class ExportResult:
    content: bytes
    media_type: str
    filename: str


class ReportExportService:
    def __init__(self, aggregator: Optional[ReportAggregator] = None,
                 renderer: Optional[ReportRenderer] = None,
                 packager: Optional[ReportPackager] = None):
        self.aggregator = aggregator or ReportAggregator()
        self.renderer = renderer or ReportRenderer()
        self.packager = packager or ReportPackager()

    async def export(self, request: ExportRequest) -> ExportResult:
        logger.info(
            f"보고서 내보내기 시작: teacher_id={request.teacher_id}, scope={request.scope.value}, "
            f"include={','.join(sorted(request.include)) or '-'}"
        )
        try:
            bundle = await self.aggregator.build(request.teacher_id, request.scope, request.date_range)
            document = await self.renderer.render(bundle, request.include_charts)
            pdf_name = build_filename(bundle.teacher.name, request.scope, bundle.generated_at, "pdf")

            if not request.wants_archive:
                result = ExportResult(document, "application/pdf", pdf_name)
            else:
                archive = self.packager.pack(bundle, document, pdf_name)
                zip_name = build_filename(bundle.teacher.name, request.scope, bundle.generated_at, "zip")
                result = ExportResult(archive, "application/zip", zip_name)
        except ReportError as e:
            logger.warning(f"보고서 내보내기 실패: teacher_id={request.teacher_id}, code={e.code}, {e.message}")
            raise

        logger.info(f"보고서 내보내기 완료: {result.filename} ({len(result.content)} bytes)")
        return result
