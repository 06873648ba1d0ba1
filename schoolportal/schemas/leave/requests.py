from datetime import date
from typing import Optional
from pydantic import Field, model_validator
from ..common.base import CamelModel
from ..enums import LeaveType

class LeaveApplyRequest(CamelModel):
    leave_type: LeaveType
    from_date: date
    to_date: date
    reason: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode='after')
    def validate_dates(self) -> 'LeaveApplyRequest':
        if self.from_date > self.to_date:
            raise ValueError("fromDate must be on or before toDate")
        return self

class LeaveDecisionRequest(CamelModel):
    remarks: Optional[str] = Field(default=None, max_length=2000)
