from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from boutique.health.service import health_db_info
from boutique.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/db")
def health_db(request: Request):
    info = health_db_info()
    info["rate_limit"] = rate_limit_health_info(request)
    return JSONResponse(info, status_code=200 if info["connect_ok"] else 503)
