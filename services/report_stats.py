"""
services/report_stats.py

- 보고서 번들의 컬렉션에서 범위별 통계를 계산하는 순수 함수 모음
- 공유 가변 상태 없이 입력 컬렉션만으로 새 불변 Stats 값을 만듭니다.
- 빈 컬렉션의 평균은 항상 0 (NaN/ZeroDivisionError 없음)
- 분석 API용 학기별 평점 추이와 종합 평가 점수도 같은 통계에서 계산합니다.
"""

from collections import Counter
from typing import Iterable, Optional, Sequence, assert_never

from schemas.records import (
    Award,
    CareerEvent,
    Certification,
    Committee,
    Community,
    Conference,
    Course,
    Education,
    EvaluationTerm,
    Grant,
    Patent,
    Position,
    ProfessionalActivity,
    Publication,
    Recognition,
    ResearchOutput,
    Review,
    ServiceContribution,
    Training,
)
from schemas.reports import (
    CareerStats,
    EvaluationScore,
    ProfessionalStats,
    RatingTrendPoint,
    ResearchStats,
    ScopeStats,
    ServiceStats,
    TeachingStats,
    TrendMetrics,
)


def safe_mean(values: Iterable[Optional[float]], ndigits: int = 2) -> float:
    """None을 제외한 평균. 값이 하나도 없으면 0.0"""
    present = [v for v in values if v is not None]
    if not present:
        return 0.0
    return round(sum(present) / len(present), ndigits)


def safe_ratio(total: float, count: int, ndigits: int = 2) -> float:
    return round(total / count, ndigits) if count else 0.0


# ==========================================================
# 강의
# ==========================================================
def teaching_stats(courses: Sequence[Course], evaluations: Sequence[EvaluationTerm]) -> TeachingStats:
    return TeachingStats(
        course_count=len(courses),
        total_enrollment=sum(c.enrollment for c in courses),
        evaluation_terms=len(evaluations),
        # 학기별 평균의 단순 평균 (기존 보고서와 수치를 맞추기 위해 응답 수 가중치 없음)
        avg_rating=safe_mean(e.avg_overall for e in evaluations),
        avg_teaching_quality=safe_mean(e.avg_teaching_quality for e in evaluations),
        avg_course_content=safe_mean(e.avg_course_content for e in evaluations),
        avg_availability=safe_mean(e.avg_availability for e in evaluations),
        total_responses=sum(e.response_count for e in evaluations),
    )


# ==========================================================
# 연구
# ==========================================================
def research_stats(outputs: Sequence[ResearchOutput]) -> ResearchStats:
    publications = grants = patents = 0
    total_funding = 0.0
    total_citations = 0
    impact_factors: list[float] = []

    for output in outputs:
        match output:
            case Publication():
                publications += 1
                total_citations += output.citation_count
                if output.impact_factor is not None:
                    impact_factors.append(output.impact_factor)
            case Grant():
                grants += 1
                total_funding += output.funding_amount
            case Patent():
                patents += 1
            case _:
                assert_never(output)

    return ResearchStats(
        total_outputs=len(outputs),
        publications=publications,
        grants=grants,
        patents=patents,
        total_funding=round(total_funding, 2),
        total_citations=total_citations,
        avg_impact_factor=safe_mean(impact_factors),
    )


# ==========================================================
# 봉사
# ==========================================================
def service_stats(contributions: Sequence[ServiceContribution]) -> ServiceStats:
    counts: Counter = Counter()
    for c in contributions:
        match c:
            case Committee():
                counts["committees"] += 1
            case Review():
                counts["reviews"] += 1
            case Community():
                counts["community"] += 1
            case _:
                assert_never(c)

    total_hours = sum(c.workload_hours for c in contributions)
    return ServiceStats(
        total_contributions=len(contributions),
        ongoing=sum(1 for c in contributions if c.ongoing),
        total_hours=total_hours,
        avg_hours_per_service=safe_ratio(total_hours, len(contributions)),
        **counts,
    )


# ==========================================================
# 전문성 개발
# ==========================================================
def professional_stats(activities: Sequence[ProfessionalActivity]) -> ProfessionalStats:
    counts: Counter = Counter()
    for a in activities:
        match a:
            case Certification():
                counts["certifications"] += 1
            case Training():
                counts["trainings"] += 1
            case Conference():
                counts["conferences"] += 1
            case Education():
                counts["education"] += 1
            case _:
                assert_never(a)

    total_hours = sum(a.duration_hours for a in activities)
    return ProfessionalStats(
        total_activities=len(activities),
        total_hours=total_hours,
        avg_hours_per_activity=safe_ratio(total_hours, len(activities)),
        **counts,
    )


# ==========================================================
# 경력
# ==========================================================
def career_stats(events: Sequence[CareerEvent]) -> CareerStats:
    counts: Counter = Counter()
    for e in events:
        match e:
            case Position():
                counts["positions"] += 1
            case Award():
                counts["awards"] += 1
            case Recognition():
                counts["recognitions"] += 1
            case _:
                assert_never(e)
        if e.achievement_level:
            counts[e.achievement_level] += 1

    return CareerStats(total_events=len(events), **counts)


def compute_scope_stats(
    domains: frozenset,
    courses: Sequence[Course] = (),
    evaluations: Sequence[EvaluationTerm] = (),
    research: Sequence[ResearchOutput] = (),
    service: Sequence[ServiceContribution] = (),
    professional: Sequence[ProfessionalActivity] = (),
    career: Sequence[CareerEvent] = (),
) -> ScopeStats:
    return ScopeStats(
        teaching=teaching_stats(courses, evaluations) if "teaching" in domains else None,
        research=research_stats(research) if "research" in domains else None,
        service=service_stats(service) if "service" in domains else None,
        professional=professional_stats(professional) if "professional" in domains else None,
        career=career_stats(career) if "career" in domains else None,
    )


# ==========================================================
# 분석: 학기별 평점 추이 / 종합 평가 점수
# ==========================================================
SEMESTER_ORDER = {"Spring": 1, "Summer": 2, "Fall": 3, "Winter": 4}

# 종합 점수 가중치 (합계 1.0)
SCORE_WEIGHTS = {"teaching": 0.4, "research": 0.3, "service": 0.15, "grants": 0.15}
MAX_SCORE = 5.0
FUNDING_PER_POINT = 50000


def rating_trends(evaluations: Sequence[EvaluationTerm]) -> list[RatingTrendPoint]:
    """학기별 평균을 오래된 학기부터 정렬 (같은 해는 Spring → Summer → Fall → Winter)"""
    ordered = sorted(evaluations, key=lambda e: (e.year, SEMESTER_ORDER.get(e.semester, 0), e.semester))
    return [
        RatingTrendPoint(
            period=f"{e.year} {e.semester}",
            year=e.year,
            semester=e.semester,
            metrics=TrendMetrics(
                overall_rating=e.avg_overall,
                teaching_quality=e.avg_teaching_quality,
                course_content=e.avg_course_content,
                availability=e.avg_availability,
            ),
            evaluation_count=e.response_count,
        )
        for e in ordered
    ]


def evaluation_score(
    teaching: Optional[TeachingStats],
    research: Optional[ResearchStats],
    service: Optional[ServiceStats],
) -> EvaluationScore:
    """도메인 통계 → 5점 만점 종합 점수

    강의는 평균 평점 그대로, 연구/봉사/연구비는 건수와 규모로 환산한 뒤 5점에서 자릅니다.
    """
    teaching = teaching or TeachingStats()
    research = research or ResearchStats()
    service = service or ServiceStats()

    teaching_score = teaching.avg_rating
    research_score = min(research.total_outputs * 0.5 + research.avg_impact_factor * 0.5, MAX_SCORE)
    service_score = min(service.total_contributions * 0.3 + service.total_hours * 0.01, MAX_SCORE)
    grant_score = min(research.total_funding / FUNDING_PER_POINT, MAX_SCORE)

    overall = (
        teaching_score * SCORE_WEIGHTS["teaching"]
        + research_score * SCORE_WEIGHTS["research"]
        + service_score * SCORE_WEIGHTS["service"]
        + grant_score * SCORE_WEIGHTS["grants"]
    )
    return EvaluationScore(
        overall_score=round(overall, 1),
        teaching_effectiveness=round(teaching.avg_teaching_quality, 1),
        research_output=round(research_score, 1),
        service_contribution=round(service_score, 1),
        grant_funding=round(grant_score, 1),
    )
