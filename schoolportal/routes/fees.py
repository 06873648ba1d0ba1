from typing import Any, Dict

from fastapi import APIRouter, Depends

from schoolportal.core.dependencies import get_school_admin, get_student
from schoolportal.core.permissions import student_scope
from schoolportal.routes.newsfeed import get_records_service
from schoolportal.schemas.auth import SessionUser
from schoolportal.schemas.student import FeeSetRequest
from schoolportal.services.records_service import RecordsService

router = APIRouter(tags=["Fees"])


@router.post("/set")
async def set_fee(
    request: FeeSetRequest,
    admin: SessionUser = Depends(get_school_admin),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    fee = await records_service.set_fee(admin, request)
    return {"message": "Fee record saved", "fee": fee}


@router.get("/mine")
async def my_fee(
    student: SessionUser = Depends(get_student),
    records_service: RecordsService = Depends(get_records_service)
) -> Dict[str, Any]:
    return {"fee": await records_service.get_fee(student_scope(student))}
