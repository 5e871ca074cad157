import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Optional

from pydantic import ValidationError

from schemas.reports import DateRange, ReportBundle, ReportScope
from services.report_data import ReportDataSource
from services.report_errors import InvalidDateRange, InvalidScope, TeacherNotFound
from services.report_stats import compute_scope_stats

logger = logging.getLogger(__name__)


def parse_scope(scope) -> ReportScope:
    """문자열/열거형 범위를 검증 (허용되지 않는 값은 InvalidScope)"""
    if isinstance(scope, ReportScope):
        return scope
    try:
        return ReportScope(str(scope).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in ReportScope)
        raise InvalidScope(f"지원하지 않는 보고서 범위입니다: {scope!r} (허용: {allowed})") from None


def parse_date_range(start: Optional[date] = None, end: Optional[date] = None) -> DateRange:
    try:
        return DateRange(start=start, end=end)
    except ValidationError:
        raise InvalidDateRange(f"from 날짜가 to 날짜보다 늦습니다: {start} > {end}") from None


class ReportAggregator:
    """교원 1명 + 범위 → ReportBundle

    도메인별 조회는 서로 의존성이 없으므로 스레드에서 동시에 실행하고,
    모두 끝난 뒤(gather) 통계를 계산합니다. 내부 재시도는 없습니다.
    """

    def __init__(self, data_source: Optional[ReportDataSource] = None):
        self.data_source = data_source or ReportDataSource()

    async def build(self, teacher_id: int, scope, date_range: Optional[DateRange] = None) -> ReportBundle:
        scope = parse_scope(scope)
        date_range = date_range or DateRange()
        ds = self.data_source

        teacher = await asyncio.to_thread(ds.get_teacher, teacher_id)
        if teacher is None:
            raise TeacherNotFound(f"교원 정보를 찾을 수 없습니다: teacher_id={teacher_id}")

        domains = scope.domains
        fetches = {}
        if "teaching" in domains:
            fetches["courses"] = (ds.list_courses, teacher_id, date_range)
            fetches["evaluations"] = (ds.list_evaluation_terms, teacher_id, date_range)
        if "research" in domains:
            fetches["research"] = (ds.list_research, teacher_id, date_range)
        if "service" in domains:
            fetches["service"] = (ds.list_service, teacher_id, date_range)
        if "professional" in domains:
            fetches["professional"] = (ds.list_professional, teacher_id, date_range)
        if "career" in domains:
            fetches["career"] = (ds.list_career, teacher_id, date_range)

        results = await asyncio.gather(*(asyncio.to_thread(*call) for call in fetches.values()))
        collections = {key: tuple(rows) for key, rows in zip(fetches.keys(), results)}

        stats = compute_scope_stats(domains, **collections)
        logger.info(
            f"보고서 집계 완료: teacher_id={teacher_id}, scope={scope.value}, "
            + ", ".join(f"{k}={len(v)}" for k, v in collections.items())
        )
        return ReportBundle(
            teacher=teacher,
            scope=scope,
            date_range=date_range,
            stats=stats,
            generated_at=datetime.now(timezone.utc),
            **collections,
        )
