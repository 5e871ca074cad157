"""
services/report_tables.py

- 컬렉션별 표 정의 (CSV 헤더, PDF 표시용 컬럼)와 기록 → 행(dict) 평탄화
- CSV 내보내기(섹션/아카이브)와 PDF 렌더러가 같은 정의를 공유합니다.
"""

import csv
import io
from typing import Any, Iterable, Sequence, assert_never

from schemas.records import (
    Award,
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
    Publication,
    Recognition,
    Review,
    Training,
)
from schemas.reports import ReportBundle

# ✅ CSV 헤더 (원래 내보내기 API와 같은 컬럼 구성 + 평가/강의)
CSV_COLUMNS = {
    "courses": ["course_code", "course_name", "semester", "year", "enrollment"],
    "evaluations": ["semester", "year", "avg_rating", "avg_teaching_quality", "avg_course_content",
                    "avg_availability", "response_count"],
    "research": ["type", "title", "description", "date", "impact_factor", "citation_count",
                 "funding_amount", "status", "url"],
    "service": ["type", "title", "organization", "role", "start_date", "end_date", "description",
                "workload_hours"],
    "professional": ["type", "title", "institution", "date_completed", "duration_hours",
                     "certificate_url", "description"],
    "career": ["type", "title", "organization", "start_date", "end_date", "description",
               "achievement_level"],
}

# ✅ PDF 표에 보여줄 (라벨, 필드) 목록
DISPLAY_COLUMNS = {
    "courses": [("Code", "course_code"), ("Course", "course_name"), ("Term", "term"),
                ("Enrollment", "enrollment")],
    "evaluations": [("Term", "term"), ("Overall", "avg_rating"), ("Teaching", "avg_teaching_quality"),
                    ("Content", "avg_course_content"), ("Availability", "avg_availability"),
                    ("Responses", "response_count")],
    "research": [("Type", "type"), ("Title", "title"), ("Date", "date"), ("Status", "status"),
                 ("Detail", "detail")],
    "service": [("Type", "type"), ("Title", "title"), ("Organization", "organization"),
                ("Role", "role"), ("Period", "period"), ("Hours", "workload_hours")],
    "professional": [("Type", "type"), ("Title", "title"), ("Institution", "institution"),
                     ("Completed", "date_completed"), ("Hours", "duration_hours")],
    "career": [("Type", "type"), ("Title", "title"), ("Organization", "organization"),
               ("Period", "period"), ("Level", "achievement_level")],
}

COLLECTIONS = tuple(CSV_COLUMNS.keys())


def _period(start, end) -> str:
    if start is None and end is None:
        return ""
    return f"{start or ''} - {end or 'present'}"


def flatten_record(record) -> dict[str, Any]:
    """기록 1건을 CSV/표시용 평면 dict로 변환 (종류별 전용 필드는 여기서만 읽음)"""
    match record:
        case Course():
            return {
                "course_code": record.course_code,
                "course_name": record.course_name,
                "semester": record.semester,
                "year": record.year,
                "term": f"{record.semester} {record.year}",
                "enrollment": record.enrollment,
            }
        case EvaluationTerm():
            return {
                "semester": record.semester,
                "year": record.year,
                "term": record.term,
                "avg_rating": record.avg_overall,
                "avg_teaching_quality": record.avg_teaching_quality,
                "avg_course_content": record.avg_course_content,
                "avg_availability": record.avg_availability,
                "response_count": record.response_count,
            }
        case Publication() | Grant() | Patent():
            row = {
                "type": record.type,
                "title": record.title,
                "description": record.description,
                "date": record.date,
                "impact_factor": None,
                "citation_count": None,
                "funding_amount": None,
                "status": record.status,
                "url": record.url,
                "detail": "",
            }
            match record:
                case Publication():
                    row["impact_factor"] = record.impact_factor
                    row["citation_count"] = record.citation_count
                    row["detail"] = f"IF {record.impact_factor if record.impact_factor is not None else '-'}, {record.citation_count} citations"
                case Grant():
                    row["funding_amount"] = record.funding_amount
                    row["detail"] = f"${record.funding_amount:,.0f}"
                case Patent():
                    pass
                case _:
                    assert_never(record)
            return row
        case Committee() | Review() | Community():
            return {
                "type": record.type,
                "title": record.title,
                "organization": record.organization,
                "role": record.role,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "period": _period(record.start_date, record.end_date),
                "description": record.description,
                "workload_hours": record.workload_hours,
            }
        case Certification() | Training() | Conference() | Education():
            return {
                "type": record.type,
                "title": record.title,
                "institution": record.institution,
                "date_completed": record.date_completed,
                "duration_hours": record.duration_hours,
                "certificate_url": record.certificate_url,
                "description": record.description,
            }
        case Position() | Award() | Recognition():
            return {
                "type": record.type,
                "title": record.title,
                "organization": record.organization,
                "start_date": record.start_date,
                "end_date": record.end_date,
                "period": _period(record.start_date, record.end_date),
                "description": record.description,
                "achievement_level": record.achievement_level,
            }
        case _:
            raise TypeError(f"지원하지 않는 기록 형식: {type(record).__name__}")


def bundle_collections(bundle: ReportBundle) -> dict[str, Sequence]:
    return {name: getattr(bundle, name) for name in COLLECTIONS}


def to_csv(rows: Iterable[dict[str, Any]], headers: Sequence[str]) -> str:
    """표준 CSV 인용 규칙(콤마/따옴표/개행 포함 값은 따옴표 처리). None은 빈 칸"""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(headers), extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in headers})
    return buffer.getvalue()


def collection_csv(name: str, records: Sequence) -> str:
    return to_csv((flatten_record(r) for r in records), CSV_COLUMNS[name])


# ✅ 아카이브/요약 CSV용 평면 통계 (수치는 모두 섹션 CSV 컬럼의 합/평균/행 수)
def summary_row(bundle: ReportBundle) -> dict[str, Any]:
    row: dict[str, Any] = {
        "teacher_id": bundle.teacher.id,
        "teacher_name": bundle.teacher.name,
        "scope": bundle.scope.value,
    }
    stats = bundle.stats
    if stats.teaching is not None:
        t = stats.teaching
        row.update({
            "course_count": t.course_count,
            "total_enrollment": t.total_enrollment,
            "evaluation_terms": t.evaluation_terms,
            "avg_rating": t.avg_rating,
            "avg_teaching_quality": t.avg_teaching_quality,
            "avg_course_content": t.avg_course_content,
            "avg_availability": t.avg_availability,
            "total_responses": t.total_responses,
        })
    if stats.research is not None:
        r = stats.research
        row.update({
            "total_research": r.total_outputs,
            "publications": r.publications,
            "grants": r.grants,
            "patents": r.patents,
            "total_funding": r.total_funding,
            "total_citations": r.total_citations,
            "avg_impact_factor": r.avg_impact_factor,
        })
    if stats.service is not None:
        s = stats.service
        row.update({
            "total_service": s.total_contributions,
            "committees": s.committees,
            "reviews": s.reviews,
            "community_service": s.community,
            "service_hours": s.total_hours,
            "avg_hours_per_service": s.avg_hours_per_service,
        })
    if stats.professional is not None:
        p = stats.professional
        row.update({
            "professional_development": p.total_activities,
            "certifications": p.certifications,
            "trainings": p.trainings,
            "conferences": p.conferences,
            "education": p.education,
            "professional_hours": p.total_hours,
            "avg_hours_per_activity": p.avg_hours_per_activity,
        })
    if stats.career is not None:
        c = stats.career
        row.update({
            "career_events": c.total_events,
            "positions": c.positions,
            "awards": c.awards,
            "recognitions": c.recognitions,
            "university_level": c.university,
            "national_level": c.national,
            "international_level": c.international,
        })
    return row


def summary_csv(bundle: ReportBundle) -> str:
    row = summary_row(bundle)
    return to_csv([row], list(row.keys()))
