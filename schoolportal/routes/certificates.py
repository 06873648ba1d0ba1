from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from schoolportal.core.dependencies import get_staff, get_tenant_session
from schoolportal.core.permissions import student_scope
from schoolportal.routes.newsfeed import get_records_service
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.records import CertificateCreateRequest
from schoolportal.services.records_service import RecordsService

router = APIRouter(tags=["Certificates"])


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_certificate(
    request: CertificateCreateRequest,
    issuer: SessionUser = Depends(get_staff),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    certificate = await records_service.create_certificate(issuer, request)
    return {"message": "Certificate issued", "certificate": certificate}


@router.get("/list")
async def list_certificates(
    student_id: Optional[int] = Query(None, alias="studentId"),
    session_user: SessionUser = Depends(get_tenant_session),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    own_id = student_scope(session_user)
    if own_id is not None:
        student_id = own_id
    return {
        "certificates": await records_service.list_certificates(session_user.school_id, student_id)
    }
