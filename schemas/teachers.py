from pydantic import BaseModel, ConfigDict
from datetime import date
from typing import Optional

# ✅ 입력용 스키마: 교원 정보를 새로 생성/수정할 때 사용 (POST/PUT 요청)
class TeacherCreate(BaseModel):
    name: str                                # 이름
    email: Optional[str] = None              # 이메일 주소
    department: str                          # 소속 학과
    position: str                            # 직위 (예: Assistant/Associate/Full Professor)
    hire_date: Optional[date] = None         # 임용일
    photo_url: Optional[str] = None          # 프로필 사진 경로
    bio: Optional[str] = None                # 소개

# ✅ 출력용 스키마: 교원 정보를 조회할 때 사용 (GET 응답, 보고서 표지)
class Teacher(TeacherCreate):
    id: int                                  # 고유 교원 ID

    model_config = ConfigDict(from_attributes=True, frozen=True)
