from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from accountability import config
from accountability.errors import DomainError, ServerFault
from accountability.routes import auth, goals, users

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    redirect_slashes=False,
    title="Accountability API",
    description="Goal tracking, progress analytics and accountability partners",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if isinstance(exc, ServerFault):
        logger.error(f"Server fault on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"detail": "Server error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Include routers
app.include_router(auth.router, prefix="/auth")
app.include_router(goals.router, prefix="/goals")
app.include_router(users.router, prefix="/users")
