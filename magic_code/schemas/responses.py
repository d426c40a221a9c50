from typing import Any, Literal

from pydantic import BaseModel, Field


class CodeSentOut(BaseModel):
    status: Literal["code_sent"] = "code_sent"


class AuthenticatedOut(BaseModel):
    status: Literal["ok"] = "ok"
    user: Any = Field(..., description="Principal returned by the verification callback")
