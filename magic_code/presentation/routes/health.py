from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request) -> dict:
    """Liveness plus the token storage backend the service was wired with."""
    return {"status": "ok", "storage": request.app.state.settings.storage_backend}
