import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from magic_code.application.strategy import MagicCodeStrategy
from magic_code.domain.entities import Action, AuthOutcome, AuthRequest
from magic_code.domain.errors import MagicCodeError
from magic_code.presentation.dependencies import get_strategy
from magic_code.schemas.responses import AuthenticatedOut, CodeSentOut

logger = logging.getLogger("magic_code.presentation.routers.v1.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])


async def _authenticate(
    strategy: MagicCodeStrategy,
    request: Request,
    body: Any,
    action: Action,
) -> AuthOutcome:
    auth_request = AuthRequest(
        body=body if isinstance(body, dict) else None,
        query=dict(request.query_params),
        params=dict(request.path_params),
    )
    try:
        return await strategy.authenticate(auth_request, {"action": action.value})
    except MagicCodeError as exc:
        logger.info(
            "magic code request rejected",
            extra={"action": action.value, "kind": exc.kind, "error": exc.error},
        )
        raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc


@router.post("/login", status_code=202, response_model=CodeSentOut)
async def post_login(
    request: Request,
    strategy: Annotated[MagicCodeStrategy, Depends(get_strategy)],
    body: Annotated[dict[str, Any] | None, Body()] = None,
):
    await _authenticate(strategy, request, body, Action.LOGIN)
    return CodeSentOut()


@router.post("/register", status_code=202, response_model=CodeSentOut)
async def post_register(
    request: Request,
    strategy: Annotated[MagicCodeStrategy, Depends(get_strategy)],
    body: Annotated[dict[str, Any] | None, Body()] = None,
):
    await _authenticate(strategy, request, body, Action.REGISTER)
    return CodeSentOut()


@router.post("/callback", response_model=AuthenticatedOut)
async def post_callback(
    request: Request,
    strategy: Annotated[MagicCodeStrategy, Depends(get_strategy)],
    body: Annotated[dict[str, Any] | None, Body()] = None,
):
    outcome = await _authenticate(strategy, request, body, Action.CALLBACK)
    return AuthenticatedOut(user=outcome.value)


@router.get("/callback", response_model=AuthenticatedOut)
async def get_callback(
    request: Request,
    strategy: Annotated[MagicCodeStrategy, Depends(get_strategy)],
):
    # magic link: code and identity arrive in the query string
    outcome = await _authenticate(strategy, request, None, Action.CALLBACK)
    return AuthenticatedOut(user=outcome.value)
