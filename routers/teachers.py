from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database.db import get_db
from models.teachers import Teacher as TeacherModel
from schemas.common import Pagination, make_meta
from schemas.teachers import TeacherCreate, Teacher
from services.report_errors import TeacherNotFound

router = APIRouter(prefix="/teachers", tags=["교원 정보"])


# ✅ 없는 교원은 보고서 API와 같은 404 + TEACHER_NOT_FOUND (전역 에러 핸들러가 직렬화)
def _not_found(teacher_id: int) -> TeacherNotFound:
    return TeacherNotFound(f"교원 정보를 찾을 수 없습니다: teacher_id={teacher_id}")


# ==========================================================
# [1단계] CRUD 라우터
# ==========================================================

# ✅ [CREATE] 교원 정보 추가
@router.post("/")
def create_teacher(teacher: TeacherCreate, db: Session = Depends(get_db)):
    db_teacher = TeacherModel(**teacher.model_dump())
    db.add(db_teacher)
    db.commit()
    db.refresh(db_teacher)
    return {
        "success": True,
        "data": Teacher.model_validate(db_teacher).model_dump(mode="json"),
        "message": "교원 정보가 성공적으로 추가되었습니다"
    }


# ✅ [READ] 교원 목록 조회 (학과 필터 + 페이징)
@router.get("/")
def read_teachers(department: str | None = None, p: Pagination = Depends(), db: Session = Depends(get_db)):
    query = db.query(TeacherModel)
    if department:
        query = query.filter(TeacherModel.department == department)
    total = query.count()
    records = query.order_by(TeacherModel.id).offset(p.offset).limit(p.size).all()
    return {
        "success": True,
        "data": [Teacher.model_validate(r).model_dump(mode="json") for r in records],
        "meta": make_meta(total, p.page, p.size).model_dump(),
        "message": "교원 목록 조회 완료"
    }


# ✅ [READ] 특정 교원 조회
@router.get("/{teacher_id}")
def read_teacher(teacher_id: int, db: Session = Depends(get_db)):
    teacher = db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()
    if teacher is None:
        raise _not_found(teacher_id)
    return {
        "success": True,
        "data": Teacher.model_validate(teacher).model_dump(mode="json"),
        "message": "교원 상세 정보 조회 성공"
    }


# ✅ [UPDATE] 교원 정보 수정
@router.put("/{teacher_id}")
def update_teacher(teacher_id: int, updated: TeacherCreate, db: Session = Depends(get_db)):
    teacher = db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()
    if teacher is None:
        raise _not_found(teacher_id)

    for key, value in updated.model_dump().items():
        setattr(teacher, key, value)

    db.commit()
    db.refresh(teacher)
    return {
        "success": True,
        "data": Teacher.model_validate(teacher).model_dump(mode="json"),
        "message": "교원 정보가 성공적으로 수정되었습니다"
    }


# ✅ [DELETE] 교원 삭제 (강의/평가/연구/봉사/전문성/경력 기록 함께 삭제)
@router.delete("/{teacher_id}")
def delete_teacher(teacher_id: int, db: Session = Depends(get_db)):
    teacher = db.query(TeacherModel).filter(TeacherModel.id == teacher_id).first()
    if teacher is None:
        raise _not_found(teacher_id)

    db.delete(teacher)
    db.commit()
    return {
        "success": True,
        "data": {"teacher_id": teacher_id},
        "message": "교원 정보가 성공적으로 삭제되었습니다"
    }
