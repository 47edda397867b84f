from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile

from app.core.errors import StorageFetchError
from app.dependencies import Container
from app.models.schemas import (
    ExtractionResult,
    HealthResponse,
    Resource,
    ResourceContextRequest,
    ResourceContextResponse,
)

router = APIRouter(prefix="/v1", tags=["documents"])


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if container is None:
        container = Container()
        request.app.state.container = container
    return container


@router.get("/health", response_model=HealthResponse)
async def health(container: Container = Depends(get_container)) -> HealthResponse:
    storage = "configured" if container.storage.enabled else "disabled"
    cloud = "enabled" if container.documents.cloud_ocr_enabled else "disabled"
    worker = "enabled" if container.documents.pdf_worker_enabled else "disabled"
    overall = "ok" if storage == "configured" else "degraded"
    return HealthResponse(status=overall, storage=storage, cloud_ocr=cloud, pdf_worker=worker)


@router.post("/documents/process", response_model=ExtractionResult)
async def process_document(
    payload: Resource,
    container: Container = Depends(get_container),
) -> ExtractionResult:
    try:
        return await container.documents.process_document(payload)
    except StorageFetchError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/documents/upload", response_model=ExtractionResult)
async def upload_document(
    file: UploadFile = File(...),
    topic: Optional[str] = Form(default=None),
    container: Container = Depends(get_container),
) -> ExtractionResult:
    content = await file.read()
    resource = Resource(
        id="upload",
        topic=topic or None,
        resource_type=(file.content_type or "").strip().lower(),
        resource_path=file.filename or "upload",
    )
    return await container.documents.process_content(resource, content)


@router.post("/documents/context", response_model=ResourceContextResponse)
async def resource_context(
    payload: ResourceContextRequest,
    container: Container = Depends(get_container),
) -> ResourceContextResponse:
    context = await container.resource_context.format_resources(payload.resources)
    return ResourceContextResponse(context=context, count=len(payload.resources))
