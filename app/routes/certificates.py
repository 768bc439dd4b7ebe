"""
Certificate Routes
Coach issuance, student listing and public verification/download
"""

from io import BytesIO
from pathlib import Path

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

from app.auth import get_current_user, get_paid_coach, get_student
from app.schemas.certificate import IssueCertificatesRequest, IssueWinningCertificatesRequest
from app.services.certificate_service import certificate_service

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


@router.post("/issue", status_code=status.HTTP_201_CREATED)
async def issue_participation(request: IssueCertificatesRequest, current_user: dict = Depends(get_paid_coach)):
    """
    Issue participation certificates to students registered for your event

    Limited to the certificates bought through paid event orders.
    """
    return await certificate_service.issue_certificates(
        current_user, request.event_id, [str(s) for s in request.student_ids], "participation"
    )


@router.post("/issue/winning", status_code=status.HTTP_201_CREATED)
async def issue_winning(request: IssueWinningCertificatesRequest, current_user: dict = Depends(get_paid_coach)):
    return await certificate_service.issue_certificates(
        current_user, request.event_id, [str(s) for s in request.student_ids], "winning", request.positions
    )


@router.get("/my-certificates")
async def my_certificates(current_user: dict = Depends(get_student)):
    return await certificate_service.list_for_student(current_user)


@router.get("/verify/{unique_id}")
async def verify_certificate(unique_id: str):
    """Public check that a certificate id is genuine"""
    return await certificate_service.verify(unique_id)


@router.get("/event/{event_id}/issued")
async def event_certificates(event_id: str, current_user: dict = Depends(get_current_user)):
    return await certificate_service.list_for_event(current_user, event_id)


@router.get("/event/{event_id}/eligible-students")
async def eligible_students(event_id: str, current_user: dict = Depends(get_current_user)):
    return await certificate_service.eligible_students(current_user, event_id)


@router.get("/{unique_id}/download")
async def download_certificate(unique_id: str):
    pdf_bytes, filename = await certificate_service.download(unique_id)
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{unique_id}/html", response_class=HTMLResponse)
async def view_certificate(unique_id: str, request: Request):
    certificate = await certificate_service.get_by_uid(unique_id)
    return templates.TemplateResponse(
        request,
        "certificate.html",
        {"certificate": certificate_service.certificate_lines(certificate)}
    )
