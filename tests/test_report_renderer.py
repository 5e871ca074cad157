"""
Tests for services/report_renderer.py

Run: pytest tests/test_report_renderer.py -v
"""

import asyncio
import threading
import time
from datetime import date, datetime, timezone

import pytest
from jinja2 import Environment, FileSystemLoader

from conftest import PDF_MAGIC, BrokenBackend, EmptyBackend, FakeBackend, SlowBackend
from schemas.records import Award, Grant, Publication
from schemas.reports import ReportBundle, ReportScope
from schemas.teachers import Teacher
from services.report_errors import RenderError, RenderTimeout
from services.report_renderer import (
    CAREER_RECORD_CAP,
    DEFAULT_RECORD_CAP,
    RendererPool,
    ReportRenderer,
    render_html,
)
from services.report_stats import compute_scope_stats

TEACHER = Teacher(id=7, name="Dr. Jane Doe", department="Computer Science", position="Associate Professor")
GENERATED_AT = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def make_bundle(scope=ReportScope.RESEARCH, research=(), career=()):
    research, career = tuple(research), tuple(career)
    return ReportBundle(
        teacher=TEACHER,
        scope=scope,
        research=research,
        career=career,
        stats=compute_scope_stats(scope.domains, research=research, career=career),
        generated_at=GENERATED_AT,
    )


def publications(n):
    return [
        Publication(id=i, teacher_id=7, type="publication", title=f"Paper {i}",
                    date=date(2024, 1, 1), impact_factor=2.0, citation_count=i)
        for i in range(1, n + 1)
    ]


def awards(n):
    return [Award(id=i, teacher_id=7, type="award", title=f"Award {i}") for i in range(1, n + 1)]


def section_html(html: str, key: str) -> str:
    start = html.index(f'id="section-{key}"')
    return html[start:html.index("</section>", start)]


class InFlightTracker:
    """동시에 실행 중인 write_pdf 호출 수 (최댓값 기록)"""

    def __init__(self):
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0
        self.calls = 0

    def enter(self):
        with self._lock:
            self.calls += 1
            self.current += 1
            self.peak = max(self.peak, self.current)

    def leave(self):
        with self._lock:
            self.current -= 1


class TrackingBackend:
    def __init__(self, tracker: InFlightTracker, delay: float):
        self.tracker = tracker
        self.delay = delay

    def write_pdf(self, html: str) -> bytes:
        self.tracker.enter()
        try:
            time.sleep(self.delay)
            return PDF_MAGIC
        finally:
            self.tracker.leave()


class TestRenderHtml:
    def test_research_section_capped_at_ten(self):
        html = render_html(make_bundle(research=publications(25)), include_charts=True)

        research = section_html(html, "research")
        assert research.count('<tr class="record">') == DEFAULT_RECORD_CAP
        assert "Showing the first 10 of 25 records." in research

    def test_small_collection_is_shown_in_full(self):
        html = render_html(make_bundle(research=publications(3)), include_charts=True)

        research = section_html(html, "research")
        assert research.count('<tr class="record">') == 3
        assert "Showing the first" not in research

    def test_career_cap_is_fifteen(self):
        bundle = make_bundle(scope=ReportScope.CAREER, career=awards(20))
        html = render_html(bundle, include_charts=True)

        assert section_html(html, "career").count('<tr class="record">') == CAREER_RECORD_CAP

    def test_cap_keeps_first_records_in_order(self):
        html = render_html(make_bundle(research=publications(12)), include_charts=False)

        research = section_html(html, "research")
        assert "Paper 10" in research
        assert "Paper 11" not in research

    def test_charts_omitted_without_flag(self):
        bundle = make_bundle(research=publications(2))

        assert 'class="chart"' in render_html(bundle, include_charts=True)
        assert 'class="chart"' not in render_html(bundle, include_charts=False)

    def test_empty_section_omitted(self):
        html = render_html(make_bundle(), include_charts=True)

        assert 'id="section-research"' not in html
        assert "Research outputs" in html

    def test_same_bundle_same_html(self):
        bundle = make_bundle(research=publications(4) + [
            Grant(id=99, teacher_id=7, type="grant", title="NSF", funding_amount=250000),
        ])
        assert render_html(bundle, True) == render_html(bundle, True)

    def test_teacher_name_is_escaped(self):
        teacher = TEACHER.model_copy(update={"name": "<script>x</script>"})
        bundle = make_bundle().model_copy(update={"teacher": teacher})

        html = render_html(bundle, include_charts=False)

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html


class TestReportRenderer:
    def test_render_returns_pdf_bytes(self):
        renderer = ReportRenderer(pool=RendererPool(FakeBackend, size=1), timeout=5)

        pdf = asyncio.run(renderer.render(make_bundle(research=publications(1))))

        assert pdf.startswith(PDF_MAGIC)
        assert b"Research Portfolio" in pdf

    def test_timeout_keeps_backend_until_thread_finishes(self):
        pool = RendererPool(lambda: SlowBackend(0.3), size=1)
        renderer = ReportRenderer(pool=pool, timeout=0.05)

        async def scenario():
            with pytest.raises(RenderTimeout):
                await renderer.render(make_bundle())
            held = pool.available
            await asyncio.sleep(0.6)
            return held, pool.available

        held, released = asyncio.run(scenario())

        assert held == 0
        assert released == 1

    def test_timeouts_never_exceed_pool_size(self):
        tracker = InFlightTracker()
        pool = RendererPool(lambda: TrackingBackend(tracker, delay=0.2), size=1)
        renderer = ReportRenderer(pool=pool, timeout=0.05)
        bundle = make_bundle()

        async def scenario():
            for _ in range(3):
                with pytest.raises(RenderTimeout):
                    await renderer.render(bundle)
            await asyncio.sleep(0.4)

        asyncio.run(scenario())

        assert tracker.calls == 3
        assert tracker.peak == 1
        assert pool.available == 1

    def test_html_is_built_off_the_event_loop(self, monkeypatch):
        threads = []
        real_render_html = render_html

        def spy(*args, **kwargs):
            threads.append(threading.current_thread())
            return real_render_html(*args, **kwargs)

        monkeypatch.setattr("services.report_renderer.render_html", spy)
        renderer = ReportRenderer(pool=RendererPool(FakeBackend, size=1), timeout=5)

        asyncio.run(renderer.render(make_bundle()))

        assert threads and threads[0] is not threading.main_thread()

    def test_template_error_is_render_error_and_releases_backend(self, tmp_path):
        (tmp_path / "teacher_report.html").write_text("{{ bundle.missing() }}", encoding="utf-8")
        env = Environment(loader=FileSystemLoader(str(tmp_path)))
        pool = RendererPool(FakeBackend, size=1)
        renderer = ReportRenderer(pool=pool, timeout=5, env=env)

        with pytest.raises(RenderError):
            asyncio.run(renderer.render(make_bundle()))
        assert pool.available == 1

    def test_backend_failure_raises_render_error_and_releases_backend(self):
        pool = RendererPool(BrokenBackend, size=1)
        renderer = ReportRenderer(pool=pool, timeout=5)

        with pytest.raises(RenderError) as exc:
            asyncio.run(renderer.render(make_bundle()))
        assert "pango" in exc.value.message
        assert pool.available == 1

    def test_empty_document_is_an_error(self):
        renderer = ReportRenderer(pool=RendererPool(EmptyBackend, size=1), timeout=5)

        with pytest.raises(RenderError):
            asyncio.run(renderer.render(make_bundle()))

    def test_pool_limits_concurrency(self):
        pool = RendererPool(FakeBackend, size=2)
        renderer = ReportRenderer(pool=pool, timeout=5)
        bundle = make_bundle(research=publications(2))

        async def run_many():
            return await asyncio.gather(*(renderer.render(bundle) for _ in range(5)))

        results = asyncio.run(run_many())

        assert len(results) == 5
        assert pool.available == 2

    def test_pool_size_must_be_positive(self):
        with pytest.raises(ValueError):
            RendererPool(FakeBackend, size=-1)
