"""
API Response Models.

Every endpoint answers with the same small envelope: `{"ok": true}` on success,
`{"ok": false, "error": "<reason>"}` otherwise.
"""

from typing import Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Standard response envelope."""
    ok: bool
    error: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "ok": False,
                "error": "phone invalid"
            }
        }

    def to_content(self) -> dict:
        """JSON body without the `error` key on success."""
        return self.model_dump(exclude_none=True)
