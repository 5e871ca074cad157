import csv
from datetime import date
from pathlib import Path
from sqlalchemy.orm import Session
from database.db import Base, SessionLocal, engine
from models.teachers import Teacher as TeacherModel  # ✅ 하위 모델까지 함께 등록됨
from models.courses import Course as CourseModel
from models.evaluations import StudentEvaluation as EvaluationModel
from models.research import ResearchOutput as ResearchModel
from models.service import ServiceContribution as ServiceModel
from models.professional import ProfessionalDevelopment as ProfessionalModel
from models.career import CareerHistory as CareerModel

DATA_DIR = Path("data")  # ✅ CSV 폴더 경로


# ✅ 빈 문자열은 None, 나머지는 형 변환
def _int(v):
    return int(float(v)) if v not in (None, "") else None

def _float(v):
    return float(v) if v not in (None, "") else None

def _date(v):
    return date.fromisoformat(v) if v else None

def _str(v):
    return v or None


# ✅ (CSV 파일, 모델, 컬럼별 변환기): 교원 먼저 (FK 대상)
TABLES = [
    ("teachers.csv", TeacherModel, {
        "id": _int, "name": _str, "email": _str, "department": _str, "position": _str,
        "hire_date": _date, "photo_url": _str, "bio": _str,
    }),
    ("courses.csv", CourseModel, {
        "id": _int, "teacher_id": _int, "course_code": _str, "course_name": _str,
        "semester": _str, "year": _int, "enrollment": _int,
    }),
    ("student_evaluations.csv", EvaluationModel, {
        "course_id": _int, "teacher_id": _int, "semester": _str, "year": _int,
        "overall_rating": _float, "teaching_quality": _float, "course_content": _float,
        "availability": _float, "comments": _str,
    }),
    ("research_outputs.csv", ResearchModel, {
        "teacher_id": _int, "type": _str, "title": _str, "description": _str, "date": _date,
        "impact_factor": _float, "citation_count": _int, "funding_amount": _float,
        "status": _str, "url": _str,
    }),
    ("service_contributions.csv", ServiceModel, {
        "teacher_id": _int, "type": _str, "title": _str, "organization": _str, "role": _str,
        "start_date": _date, "end_date": _date, "description": _str, "workload_hours": _int,
    }),
    ("professional_development.csv", ProfessionalModel, {
        "teacher_id": _int, "type": _str, "title": _str, "institution": _str,
        "date_completed": _date, "duration_hours": _int, "certificate_url": _str, "description": _str,
    }),
    ("career_history.csv", CareerModel, {
        "teacher_id": _int, "type": _str, "title": _str, "organization": _str,
        "start_date": _date, "end_date": _date, "description": _str, "achievement_level": _str,
    }),
]


def import_table(db: Session, filename: str, model, converters: dict) -> int:
    path = DATA_DIR / filename
    if not path.exists():
        print(f"⚠️ 파일 없음, 건너뜀: {path}")
        return 0

    count = 0
    with open(path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for line_no, row in enumerate(reader, start=2):
            try:
                values = {col: convert(row.get(col)) for col, convert in converters.items()}
            except ValueError as e:
                print(f"⚠️ 형식 오류 ({filename}:{line_no}): {e}")
                continue
            db.add(model(**values))
            count += 1
    db.flush()
    return count


def migrate_records():
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    try:
        for filename, model, converters in TABLES:
            count = import_table(db, filename, model, converters)
            print(f"  - {filename}: {count}건")
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    print("✅ 교원 평가 데이터 CSV → DB 마이그레이션 완료")


if __name__ == "__main__":
    migrate_records()
