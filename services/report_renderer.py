"""
services/report_renderer.py

- ReportBundle → 섹션 서술자(ReportSection) 목록 → Jinja2 HTML → WeasyPrint PDF
- 레이아웃은 templates/teacher_report.html 하나가 모든 범위를 처리합니다.
- 섹션별 표시 상한: 기본 10건, 경력 15건 (집계기가 돌려준 순서 그대로 앞에서부터)
- PDF 백엔드는 풀에서 빌려 쓰고 성공/실패와 관계없이 반납합니다.
  시간 초과 시에는 워커 스레드가 실제로 끝난 뒤 반납하므로 풀 크기가 동시 렌더링 수의 상한입니다.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from config.settings import settings
from schemas.reports import ReportBundle
from services.report_errors import RenderError, RenderTimeout
from services.report_tables import DISPLAY_COLUMNS, flatten_record

logger = logging.getLogger(__name__)

DEFAULT_RECORD_CAP = 10
CAREER_RECORD_CAP = 15
TEMPLATE_NAME = "teacher_report.html"


# =========================================================
# 1) 섹션 서술자
# =========================================================

@dataclass(frozen=True)
class ChartBar:
    label: str
    value: float
    percent: float                          # 막대 길이 (최댓값 대비 %)


@dataclass(frozen=True)
class ReportSection:
    key: str
    heading: str
    stats: list[tuple[str, Any]] = field(default_factory=list)
    columns: list[tuple[str, str]] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0
    cap: int = DEFAULT_RECORD_CAP
    chart_title: Optional[str] = None
    chart: Optional[list[ChartBar]] = None

    @property
    def shown(self) -> int:
        return len(self.rows)


def _chart(pairs: list[tuple[str, float]]) -> list[ChartBar]:
    peak = max((v for _, v in pairs), default=0)
    return [ChartBar(label, value, round(value / peak * 100, 1) if peak else 0.0) for label, value in pairs]


def _fmt(value: Any) -> Any:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return value


def _section(key, heading, records, stats, chart_title=None, chart_pairs=None, include_charts=True,
             cap=DEFAULT_RECORD_CAP) -> ReportSection:
    columns = DISPLAY_COLUMNS[key]
    rows = []
    for record in records[:cap]:
        flat = flatten_record(record)
        rows.append({f: _fmt(flat.get(f)) for _, f in columns})
    chart = _chart(chart_pairs) if include_charts and chart_pairs is not None else None
    return ReportSection(
        key=key,
        heading=heading,
        stats=[(label, _fmt(v)) for label, v in stats],
        columns=columns,
        rows=rows,
        total=len(records),
        cap=cap,
        chart_title=chart_title if chart is not None else None,
        chart=chart,
    )


def build_sections(bundle: ReportBundle, include_charts: bool) -> list[ReportSection]:
    """채워진 컬렉션마다 섹션 1개 (순서: 강의 → 평가 → 연구 → 봉사 → 전문성 → 경력)"""
    stats = bundle.stats
    sections: list[ReportSection] = []

    if stats.teaching is not None:
        t = stats.teaching
        if bundle.courses:
            sections.append(_section(
                "courses", "Courses Taught", bundle.courses,
                [("Courses", t.course_count), ("Total enrollment", t.total_enrollment)],
                include_charts=False,
            ))
        if bundle.evaluations:
            sections.append(_section(
                "evaluations", "Student Evaluations", bundle.evaluations,
                [("Evaluated terms", t.evaluation_terms), ("Average rating", t.avg_rating),
                 ("Teaching quality", t.avg_teaching_quality), ("Course content", t.avg_course_content),
                 ("Availability", t.avg_availability), ("Total responses", t.total_responses)],
                "Average rating by term",
                [(e.term, e.avg_overall) for e in bundle.evaluations],
                include_charts,
            ))

    if stats.research is not None and bundle.research:
        r = stats.research
        sections.append(_section(
            "research", "Research Output", bundle.research,
            [("Total outputs", r.total_outputs), ("Publications", r.publications), ("Grants", r.grants),
             ("Patents", r.patents), ("Total funding", r.total_funding),
             ("Total citations", r.total_citations), ("Average impact factor", r.avg_impact_factor)],
            "Outputs by type",
            [("Publications", r.publications), ("Grants", r.grants), ("Patents", r.patents)],
            include_charts,
        ))

    if stats.service is not None and bundle.service:
        s = stats.service
        sections.append(_section(
            "service", "Service Contributions", bundle.service,
            [("Total contributions", s.total_contributions), ("Ongoing", s.ongoing),
             ("Total hours", s.total_hours), ("Average hours per contribution", s.avg_hours_per_service)],
            "Contributions by type",
            [("Committee", s.committees), ("Review", s.reviews), ("Community", s.community)],
            include_charts,
        ))

    if stats.professional is not None and bundle.professional:
        p = stats.professional
        sections.append(_section(
            "professional", "Professional Development", bundle.professional,
            [("Total activities", p.total_activities), ("Total hours", p.total_hours),
             ("Average hours per activity", p.avg_hours_per_activity)],
            "Activities by type",
            [("Certification", p.certifications), ("Training", p.trainings),
             ("Conference", p.conferences), ("Education", p.education)],
            include_charts,
        ))

    if stats.career is not None and bundle.career:
        c = stats.career
        sections.append(_section(
            "career", "Career History", bundle.career,
            [("Total events", c.total_events), ("Positions", c.positions), ("Awards", c.awards),
             ("Recognitions", c.recognitions)],
            "Achievements by level",
            [("University", c.university), ("National", c.national), ("International", c.international)],
            include_charts,
            cap=CAREER_RECORD_CAP,
        ))

    return sections


def build_summary(bundle: ReportBundle) -> list[tuple[str, Any]]:
    """요약 섹션의 핵심 지표 (범위에 포함된 도메인만)"""
    s = bundle.stats
    items: list[tuple[str, Any]] = []
    if s.teaching is not None:
        items += [("Courses taught", s.teaching.course_count),
                  ("Average student rating", _fmt(s.teaching.avg_rating)),
                  ("Evaluation responses", s.teaching.total_responses)]
    if s.research is not None:
        items += [("Research outputs", s.research.total_outputs),
                  ("Research funding", _fmt(s.research.total_funding)),
                  ("Citations", s.research.total_citations)]
    if s.service is not None:
        items += [("Service contributions", s.service.total_contributions),
                  ("Service hours", s.service.total_hours)]
    if s.professional is not None:
        items += [("Development activities", s.professional.total_activities),
                  ("Development hours", s.professional.total_hours)]
    if s.career is not None:
        items += [("Career events", s.career.total_events),
                  ("International achievements", s.career.international)]
    return items


# =========================================================
# 2) HTML
# =========================================================

def _environment(template_dir: Path) -> Environment:
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_html(bundle: ReportBundle, include_charts: bool, env: Optional[Environment] = None) -> str:
    """같은 번들 + 같은 플래그 → 같은 HTML (generated_at만 예외)"""
    env = env or _environment(settings.REPORT_TEMPLATE_DIR)
    try:
        template = env.get_template(TEMPLATE_NAME)
        return template.render(
            bundle=bundle,
            teacher=bundle.teacher,
            scope_label=bundle.scope.label,
            summary=build_summary(bundle),
            sections=build_sections(bundle, include_charts),
            include_charts=include_charts,
            default_cap=DEFAULT_RECORD_CAP,
            career_cap=CAREER_RECORD_CAP,
            page_size=settings.REPORT_PAGE_SIZE,
            generated_at=bundle.generated_at.strftime("%Y-%m-%d %H:%M:%S UTC"),
        )
    except TemplateError as e:
        logger.error(f"보고서 템플릿 렌더링 실패: {e}")
        raise RenderError(f"보고서 템플릿 렌더링 실패: {e}") from e
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.error(f"보고서 데이터 형식 오류: {e}")
        raise RenderError(f"보고서 데이터 형식 오류: {e}") from e


# =========================================================
# 3) PDF 백엔드 / 풀
# =========================================================

class PDFBackend(Protocol):
    def write_pdf(self, html: str) -> bytes: ...


class WeasyPrintBackend:
    """HTML → 고정 페이지 크기 PDF (WeasyPrint)"""

    def __init__(self, base_url: Optional[str] = None, font_dir: Optional[str] = None):
        self.base_url = base_url or str(settings.REPORT_TEMPLATE_DIR)
        self.font_dir = font_dir or settings.WEASYPRINT_FONT_DIR

    def write_pdf(self, html: str) -> bytes:
        # weasyprint는 pango 등 시스템 라이브러리를 로드하므로 실제 렌더링 시점에 import
        import weasyprint
        from weasyprint.text.fonts import FontConfiguration

        font_config = FontConfiguration()
        stylesheets = []
        if self.font_dir:
            css = "".join(
                f"@font-face {{ font-family: '{p.stem}'; src: url('{p.as_uri()}'); }}"
                for p in sorted(Path(self.font_dir).glob("*.[ot]tf"))
            )
            stylesheets.append(weasyprint.CSS(string=css, font_config=font_config))
        return weasyprint.HTML(string=html, base_url=self.base_url).write_pdf(
            stylesheets=stylesheets, font_config=font_config
        )


class RendererPool:
    """백엔드 인스턴스 풀. 체크아웃된 백엔드 수가 동시 렌더링 수의 상한입니다.

    시간 초과로 포기한 렌더링도 워커 스레드가 끝날 때까지는 슬롯을 점유합니다.
    """

    def __init__(self, backend_factory: Callable[[], PDFBackend] = WeasyPrintBackend, size: Optional[int] = None):
        size = size or settings.REPORT_RENDER_POOL_SIZE
        if size < 1:
            raise ValueError("렌더러 풀 크기는 1 이상이어야 합니다")
        self.size = size
        self._idle: deque = deque(backend_factory() for _ in range(size))
        self._slots = asyncio.Semaphore(size)

    @property
    def available(self) -> int:
        return len(self._idle)

    async def checkout(self) -> PDFBackend:
        await self._slots.acquire()
        return self._idle.popleft()

    def checkin(self, backend: PDFBackend):
        self._idle.append(backend)
        self._slots.release()

    def checkin_when_done(self, backend: PDFBackend, job: asyncio.Future):
        """워커 스레드가 끝난 뒤에 반납 (스레드는 취소할 수 없음)"""
        def _release(fut: asyncio.Future):
            if not fut.cancelled() and fut.exception() is not None:
                logger.warning(f"중단된 PDF 렌더링이 실패로 끝남: {fut.exception()}")
            self.checkin(backend)
        job.add_done_callback(_release)


def _render_document(backend: PDFBackend, bundle: ReportBundle, include_charts: bool,
                     env: Optional[Environment]) -> bytes:
    return backend.write_pdf(render_html(bundle, include_charts, env))


class ReportRenderer:
    def __init__(self, pool: Optional[RendererPool] = None, timeout: Optional[float] = None,
                 env: Optional[Environment] = None):
        self.pool = pool or RendererPool()
        self.timeout = timeout if timeout is not None else settings.REPORT_RENDER_TIMEOUT
        self.env = env

    async def render(self, bundle: ReportBundle, include_charts: bool = True) -> bytes:
        backend = await self.pool.checkout()
        loop = asyncio.get_running_loop()
        # HTML 생성과 PDF 변환 모두 워커 스레드에서 (이벤트 루프를 막지 않음)
        job = loop.run_in_executor(None, _render_document, backend, bundle, include_charts, self.env)
        try:
            pdf = await asyncio.wait_for(asyncio.shield(job), timeout=self.timeout)
        except asyncio.TimeoutError:
            self.pool.checkin_when_done(backend, job)
            logger.error(f"PDF 렌더링 시간 초과: {self.timeout}s, teacher_id={bundle.teacher.id}")
            raise RenderTimeout(f"PDF 렌더링이 {self.timeout}초 안에 끝나지 않았습니다") from None
        except asyncio.CancelledError:
            self.pool.checkin_when_done(backend, job)
            raise
        except RenderError:
            self.pool.checkin(backend)
            raise
        except Exception as e:
            self.pool.checkin(backend)
            logger.exception(f"PDF 렌더링 실패: teacher_id={bundle.teacher.id}")
            raise RenderError(f"PDF 렌더링 실패: {e}") from e

        self.pool.checkin(backend)
        if not pdf:
            raise RenderError("PDF 렌더러가 빈 문서를 반환했습니다")
        return pdf
