from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from routers.exports import get_data_source
from schemas.reports import ReportScope
from services.report_aggregator import ReportAggregator, parse_date_range
from services.report_data import ReportDataSource
from services.report_stats import evaluation_score, rating_trends

router = APIRouter(prefix="/analytics", tags=["교원 평가 분석"])


# ==========================================================
# ✅ [TRENDS] 학기별 강의평가 평점 추이
# ==========================================================
@router.get("/teachers/{teacher_id}/trends/ratings")
async def rating_trend(
    teacher_id: int,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    ds: ReportDataSource = Depends(get_data_source),
):
    date_range = parse_date_range(date_from, date_to)
    bundle = await ReportAggregator(ds).build(teacher_id, ReportScope.TEACHING, date_range)
    points = rating_trends(bundle.evaluations)
    return {
        "success": True,
        "data": [p.model_dump(mode="json") for p in points],
        "message": f"학기별 평점 추이 조회 완료 ({len(points)}개 학기)"
    }


# ==========================================================
# ✅ [EVALUATION] 종합 평가 점수 (강의 0.4 / 연구 0.3 / 봉사 0.15 / 연구비 0.15)
# ==========================================================
@router.get("/teachers/{teacher_id}/evaluation")
async def teacher_evaluation(
    teacher_id: int,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    ds: ReportDataSource = Depends(get_data_source),
):
    date_range = parse_date_range(date_from, date_to)
    bundle = await ReportAggregator(ds).build(teacher_id, ReportScope.OVERVIEW, date_range)
    stats = bundle.stats
    score = evaluation_score(stats.teaching, stats.research, stats.service)
    return {
        "success": True,
        "data": {
            "teacher": bundle.teacher.model_dump(mode="json"),
            "evaluation": score.model_dump(),
            "metrics": {
                "teaching": stats.teaching.model_dump(),
                "research": stats.research.model_dump(),
                "service": stats.service.model_dump(),
            },
        },
        "message": "교원 종합 평가 조회 완료"
    }
