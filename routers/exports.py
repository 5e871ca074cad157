from datetime import date, datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from middlewares.error_handler import error_response
from schemas.reports import ReportScope
from services.report_aggregator import ReportAggregator, parse_date_range, parse_scope
from services.report_data import ReportDataSource
from services.report_errors import TeacherNotFound
from services.report_export import ExportRequest, ReportExportService, parse_include
from services.report_tables import COLLECTIONS, collection_csv, summary_csv, summary_row

router = APIRouter(prefix="/exports", tags=["보고서 내보내기"])

# ✅ 대시보드가 아닌 외부 연동용 단축 경로 (/export?scope=...)
export_router = APIRouter(tags=["보고서 내보내기"])


# ==========================================================
# [공통] 서비스 의존성
# ==========================================================
_export_service: Optional[ReportExportService] = None


def get_export_service() -> ReportExportService:
    global _export_service
    if _export_service is None:
        _export_service = ReportExportService()
    return _export_service


def get_data_source() -> ReportDataSource:
    return ReportDataSource()


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _require_teacher(ds: ReportDataSource, teacher_id: int):
    teacher = ds.get_teacher(teacher_id)
    if teacher is None:
        raise TeacherNotFound(f"교원 정보를 찾을 수 없습니다: teacher_id={teacher_id}")
    return teacher


# ==========================================================
# ✅ [REPORT] PDF / ZIP 보고서 생성
# ==========================================================
@router.get("/reports/generate")
@export_router.get("/export")
async def generate_report(
    scope: str = Query(..., description="overview | teaching | research | service | professional | career | portfolio"),
    teacher_id: int = Query(..., alias="teacherId"),
    format: Literal["pdf"] = Query("pdf"),
    include: Optional[str] = Query(None, description="charts | raw | charts,raw"),
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    service: ReportExportService = Depends(get_export_service),
):
    """보고서 생성 후 바이트 스트림으로 반환 (raw 포함은 portfolio 범위에서만 ZIP)"""
    report_scope = parse_scope(scope)
    try:
        include_set = parse_include(include)
    except ValueError as e:
        return error_response(400, "INVALID_INCLUDE", str(e))
    date_range = parse_date_range(date_from, date_to)

    request = ExportRequest(teacher_id=teacher_id, scope=report_scope, include=include_set, date_range=date_range)
    result = await service.export(request)
    return _attachment(result.content, result.media_type, result.filename)


# ==========================================================
# ✅ [SECTION] 섹션별 데이터 내보내기 (JSON / CSV)
# ==========================================================
def _section_export(name: str, teacher_id: int, records: list, format: str, suffix: str = ""):
    if format == "csv":
        return _attachment(
            collection_csv(name, records),
            "text/csv; charset=utf-8",
            f"{name}_data_{teacher_id}{suffix}.csv",
        )
    return {
        "success": True,
        "data": [r.model_dump(mode="json") for r in records],
        "export_info": {
            "teacher_id": teacher_id,
            "type": name,
            "exported_at": _now_iso(),
            "total_records": len(records),
        },
    }


@router.get("/research/{teacher_id}")
def export_research(
    teacher_id: int,
    format: Literal["json", "csv"] = "json",
    type: Literal["all", "publications", "grants", "patents"] = "all",
    ds: ReportDataSource = Depends(get_data_source),
):
    _require_teacher(ds, teacher_id)
    record_type = None if type == "all" else type[:-1]   # publications → publication
    records = ds.list_research(teacher_id, type=record_type)
    return _section_export("research", teacher_id, records, format, f"_{type}")


@router.get("/service/{teacher_id}")
def export_service(teacher_id: int, format: Literal["json", "csv"] = "json",
                   ds: ReportDataSource = Depends(get_data_source)):
    _require_teacher(ds, teacher_id)
    return _section_export("service", teacher_id, ds.list_service(teacher_id), format)


@router.get("/professional/{teacher_id}")
def export_professional(teacher_id: int, format: Literal["json", "csv"] = "json",
                        ds: ReportDataSource = Depends(get_data_source)):
    _require_teacher(ds, teacher_id)
    return _section_export("professional", teacher_id, ds.list_professional(teacher_id), format)


@router.get("/career/{teacher_id}")
def export_career(teacher_id: int, format: Literal["json", "csv"] = "json",
                  ds: ReportDataSource = Depends(get_data_source)):
    _require_teacher(ds, teacher_id)
    return _section_export("career", teacher_id, ds.list_career(teacher_id), format)


# ==========================================================
# ✅ [COMPLETE] 교원 전체 데이터 (JSON)
# ==========================================================
@router.get("/complete-report/{teacher_id}")
async def export_complete_report(teacher_id: int, ds: ReportDataSource = Depends(get_data_source)):
    bundle = await ReportAggregator(ds).build(teacher_id, ReportScope.PORTFOLIO)
    data = bundle.model_dump(mode="json", exclude={"scope", "date_range", "generated_at"})
    return {
        "success": True,
        "data": data,
        "export_info": {
            "teacher_id": teacher_id,
            "type": "complete_report",
            "exported_at": _now_iso(),
            "sections": list(COLLECTIONS),
            "teacher_name": bundle.teacher.name,
        },
    }


# ==========================================================
# ✅ [SUMMARY] 통계 요약 (JSON / CSV)
# ==========================================================
@router.get("/summary/{teacher_id}")
async def export_summary(teacher_id: int, format: Literal["json", "csv"] = "json",
                         ds: ReportDataSource = Depends(get_data_source)):
    bundle = await ReportAggregator(ds).build(teacher_id, ReportScope.PORTFOLIO)
    if format == "csv":
        return _attachment(summary_csv(bundle), "text/csv; charset=utf-8", f"summary_{teacher_id}.csv")
    return {
        "success": True,
        "data": {
            "stats": bundle.stats.model_dump(mode="json"),
            "flat": summary_row(bundle),
        },
        "export_info": {
            "teacher_id": teacher_id,
            "type": "summary",
            "exported_at": _now_iso(),
        },
    }
