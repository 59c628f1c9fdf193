from fastapi import APIRouter

from clickup_archiver.archive_store import get_archive_store
from clickup_archiver.models.archive import ArchiveBatchRequest, ArchiveBatchResponse
from clickup_archiver.services import archive as archive_service
from clickup_archiver.services.clickup import configured_api_key

router = APIRouter(prefix="/api", tags=["archive"])


@router.post("/archiveBatch")
async def archive_batch(request: ArchiveBatchRequest) -> ArchiveBatchResponse:
    api_key = configured_api_key()
    store = get_archive_store()
    results = await archive_service.archive_batch(request.tasks, store, api_key)
    successful = sum(1 for r in results if r.success)
    return ArchiveBatchResponse(
        success=successful == len(results),
        processed=len(results),
        successful=successful,
        failed=len(results) - successful,
        results=results,
    )
