from sqlalchemy import Column, Integer, String, Float, ForeignKey
from database.db import Base


class StudentEvaluation(Base):
    __tablename__ = "student_evaluations"  # 학생 강의평가 원본 (학생 1명 = 1행)

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"))                       # 평가 대상 강좌
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False, index=True)
    semester = Column(String(20), nullable=False)
    year = Column(Integer, nullable=False)

    # 평점은 모두 1.0 ~ 5.0 범위 (입력 단계에서 검증)
    overall_rating = Column(Float, nullable=False)                              # 종합 평점
    teaching_quality = Column(Float)                                            # 강의 품질
    course_content = Column(Float)                                              # 강의 내용
    availability = Column(Float)                                                # 면담/소통 가능성
    comments = Column(String(1000))                                             # 자유 의견
