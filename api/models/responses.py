"""Response models and builders for API endpoints."""
from datetime import datetime
from typing import Dict, Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from utils.json_utils import prepare_for_json


class RequestOut(BaseModel):
    """A ledger row as exposed by the ops API."""
    id: int
    status: str
    kind: str
    target_id: str
    claim_owner: Optional[str] = None
    payload: Dict[str, Any] = {}
    error_detail: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class APIResponse:
    """Standardized API response builder."""

    @staticmethod
    def success(data: Any = None, message: Optional[str] = None, status_code: int = 200) -> JSONResponse:
        """Build a success response."""
        content = {"success": True}

        if data is not None:
            content["data"] = prepare_for_json(data)

        if message:
            content["message"] = message

        return JSONResponse(status_code=status_code, content=content)
