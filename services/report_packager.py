import io
import logging
import zipfile

from schemas.reports import ReportBundle
from services.report_errors import PackagingError
from services.report_tables import bundle_collections, collection_csv, summary_csv

logger = logging.getLogger(__name__)


class ReportPackager:
    """PDF + 섹션별 CSV + 요약 CSV → ZIP

    메모리 버퍼에 전부 쓴 뒤 한 번에 돌려주므로, 중간에 실패하면 부분 아카이브는 남지 않습니다.
    """

    def pack(self, bundle: ReportBundle, document: bytes, document_filename: str) -> bytes:
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                archive.writestr(document_filename, document)
                for name, records in bundle_collections(bundle).items():
                    if not records:
                        continue
                    archive.writestr(f"data/{name}.csv", collection_csv(name, records).encode("utf-8-sig"))
                archive.writestr("data/summary.csv", summary_csv(bundle).encode("utf-8-sig"))
        except Exception as e:
            logger.exception(f"보고서 아카이브 생성 실패: teacher_id={bundle.teacher.id}")
            raise PackagingError(f"보고서 아카이브 생성 실패: {e}") from e

        content = buffer.getvalue()
        logger.info(f"보고서 아카이브 생성 완료: {document_filename}, {len(content)} bytes")
        return content
