from typing import Any, Dict, Optional
from pydantic import BaseModel

class ErrorResponse(BaseModel):
    message: str
    error_code: str
    details: Optional[Dict[str, Any]] = None
