import uvicorn
import time
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from bugtracker.api.auth import router as auth_router
from bugtracker.api.dashboard import router as dashboard_router
from bugtracker.api.bugs import router as bugs_router
from bugtracker.api.admin import router as admin_router
from bugtracker.core.config import CORS_ORIGINS, QUERY_CACHE_TTL
from bugtracker.core.constants import BACKEND_DOWN_NOTICE
from bugtracker.services.api_client import NetworkFailure
from bugtracker.services.query_cache import QueryCache
from bugtracker.views.queries import AccessDenied, BugNotFound
from bugtracker.utils.logging_config import setup_logging

setup_logging(level=logging.INFO)
logger = logging.getLogger("main")

app = FastAPI(title="Bug Tracker Client API")
app.state.query_cache = QueryCache(ttl=QUERY_CACHE_TTL)

# ---------------------------------------------------------------------------
# Logging Middleware
# ---------------------------------------------------------------------------
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Incoming: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"Outgoing: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.2f}ms"
            )
            return response
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - Error: {str(e)}")
            raise e

app.add_middleware(LoggingMiddleware)

# ---------------------------------------------------------------------------
# CORS — allow the browser front end to call this service
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.exception_handler(NetworkFailure)
async def network_failure_handler(request: Request, exc: NetworkFailure):
    logger.error(f"Backend failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": BACKEND_DOWN_NOTICE})


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(BugNotFound)
async def bug_not_found_handler(request: Request, exc: BugNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

# Health endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok"}

# Register routers
app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(bugs_router)
app.include_router(admin_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
