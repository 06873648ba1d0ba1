from .requests import LeaveApplyRequest, LeaveDecisionRequest
from .responses import LeaveResponse, LeaveDetailResponse

__all__ = ['LeaveApplyRequest', 'LeaveDecisionRequest', 'LeaveResponse', 'LeaveDetailResponse']
