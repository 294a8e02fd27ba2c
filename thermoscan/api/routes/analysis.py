"""
Analysis routes for the ThermoScan API.

This module contains the pipeline endpoints:
- POST /api/analyses - Submit a thermogram and run the pipeline
- GET /api/state - Current display state
- GET /api/history - Stored analysis records, most recent first
- POST /api/history/{record_id}/select - Display a stored record
- DELETE /api/history/{record_id} - Delete a stored record
- GET /api/history/{record_id}/heatmap - Heatmap overlay as PNG
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response

from thermoscan.infrastructure.container import Container
from thermoscan.schemas import AnalysisRecord, DisplayState, PatientMetadata, SubmittedImage
from thermoscan.services.pipeline.exceptions import RecordNotFoundError
from thermoscan.services.pipeline.orchestrator import PipelineOrchestrator
from thermoscan.services.rendering.heatmap_compositor import HeatmapCompositor
from thermoscan.utils.structured_logger import request_end, request_error, request_start

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_orchestrator(container: Container = Depends(get_container)) -> PipelineOrchestrator:
    return container.get_orchestrator()


def get_compositor(container: Container = Depends(get_container)) -> HeatmapCompositor:
    return container.get_heatmap_compositor()


def _build_metadata(
    age: Optional[int], sex: Optional[str], symptoms: Optional[str]
) -> Optional[PatientMetadata]:
    if age is None and sex is None and not symptoms:
        return None
    return PatientMetadata(age=age, sex=sex, symptoms=symptoms or None)


@router.post(
    "/api/analyses",
    response_model=DisplayState,
    summary="Analyze a thermogram",
    description="Upload a thermographic image and run quality check, analysis and AI summary.",
)
async def submit_analysis(
    file: UploadFile = File(...),
    age: Optional[int] = Form(None, ge=0, le=150),
    sex: Optional[Literal["Female", "Male", "Other"]] = Form(None),
    symptoms: Optional[str] = Form(None),
    container: Container = Depends(get_container),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
):
    endpoint = "/api/analyses"
    start_time = request_start(endpoint, filename=file.filename)

    if not (file.content_type or "").startswith("image/"):
        request_error(endpoint, start_time, http_status=415, error="not an image")
        raise HTTPException(status_code=415, detail="Please upload a valid image file.")

    content = await file.read()
    max_bytes = container.settings.get_config().pipeline.max_upload_bytes
    if len(content) > max_bytes:
        request_error(endpoint, start_time, http_status=413, error="upload too large")
        raise HTTPException(
            status_code=413, detail=f"Image exceeds the {max_bytes} byte upload limit."
        )

    image = SubmittedImage(
        content=content, filename=file.filename, content_type=file.content_type
    )
    try:
        state = await orchestrator.submit(image, _build_metadata(age, sex, symptoms))
    except Exception as e:
        request_error(endpoint, start_time, error=str(e))
        raise HTTPException(status_code=500, detail="Analysis failed")

    request_end(endpoint, start_time, status=state.status.value)
    return state


@router.get("/api/state", response_model=DisplayState)
async def get_state(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    return orchestrator.state


@router.get("/api/history", response_model=List[AnalysisRecord])
async def list_history(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    return orchestrator.history


@router.post("/api/history/{record_id}/select", response_model=DisplayState)
async def select_history(
    record_id: str, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)
):
    try:
        return orchestrator.select(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/history/{record_id}", response_model=DisplayState)
async def delete_history(
    record_id: str, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)
):
    try:
        return orchestrator.delete(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/api/history/{record_id}/heatmap",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
    summary="Render heatmap overlay",
)
def get_heatmap(
    record_id: str,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
    compositor: HeatmapCompositor = Depends(get_compositor),
):
    # Plain def: decoding and compositing run in the threadpool
    try:
        record = orchestrator.get_record(record_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    base_image = orchestrator.load_image(record.source_image_ref)
    png = compositor.render_png(base_image, record.hotspots)
    return Response(content=png, media_type="image/png")
