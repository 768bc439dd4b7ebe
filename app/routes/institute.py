"""
Institute Routes
Profile, dashboard, students, coaches and roster imports
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from io import BytesIO

from app.auth import get_institute, get_approved_institute
from app.schemas.profile import InstituteProfileUpdate
from app.services.institute_service import institute_service
from app.services.roster_parser import roster_parser
from app.services.roster_import_service import roster_import_service
from app.utils.helpers import get_pagination_params

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_institute)):
    return await institute_service.get_profile(current_user)


@router.put("/profile")
async def update_profile(request: InstituteProfileUpdate, current_user: dict = Depends(get_institute)):
    return await institute_service.update_profile(current_user, request.model_dump(exclude_unset=True))


@router.get("/dashboard")
async def get_dashboard(current_user: dict = Depends(get_institute)):
    return await institute_service.get_dashboard(current_user)


@router.get("/students")
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_institute)
):
    paging = get_pagination_params(page, limit)
    return await institute_service.list_students(
        current_user, paging["page"], paging["limit"], paging["offset"], search
    )


@router.get("/bulk-upload/template")
async def download_roster_template(current_user: dict = Depends(get_institute)):
    """Blank XLSX roster with the expected columns"""
    return StreamingResponse(
        BytesIO(roster_parser.build_template()),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=student_upload_template.xlsx"}
    )


@router.post("/bulk-upload/students", status_code=status.HTTP_201_CREATED)
async def bulk_upload_students(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_approved_institute)
):
    """
    Create student accounts from a CSV/XLSX roster (max 100 rows)

    Required columns: firstName, lastName, email, phone.
    Per-row errors carry the spreadsheet row number.
    """
    content = await file.read()
    return await roster_import_service.import_students(
        file.filename, content, "INSTITUTE", current_user["profile"]
    )


@router.get("/coaches")
async def list_coaches(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    specialization: Optional[str] = Query(None),
    approval_status: Optional[str] = Query(None, alias="approvalStatus"),
    current_user: dict = Depends(get_institute)
):
    paging = get_pagination_params(page, limit)
    return await institute_service.list_coaches(
        current_user, paging["page"], paging["limit"], paging["offset"], search, specialization, approval_status
    )


@router.get("/bulk-upload/coach-template")
async def download_coach_template(current_user: dict = Depends(get_institute)):
    return StreamingResponse(
        BytesIO(roster_parser.build_template("coach")),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=coach_upload_template.xlsx"}
    )


@router.post("/bulk-upload/coaches", status_code=status.HTTP_201_CREATED)
async def bulk_upload_coaches(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_approved_institute)
):
    """
    Create coach accounts from a CSV/XLSX roster (max 50 rows)

    Required columns: firstName, lastName, email, phone, specialization.
    Imported coaches start PENDING admin approval.
    """
    content = await file.read()
    return await roster_import_service.import_coaches(file.filename, content, current_user["profile"])
