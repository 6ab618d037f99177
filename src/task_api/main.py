from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .errors import install_error_handlers
from .logging_setup import setup_logging
from .repositories import Repository, get_repository
from .routers import tasks as tasks_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": (
            "CRUD operations for tasks. Bodies are flat JSON objects and due dates "
            "are Unix epoch seconds."
        ),
    },
]

_settings = get_settings()
setup_logging(_settings.log_level)

app = FastAPI(
    title="Task Backend",
    description="REST API for tracking tasks with flat JSON bodies and epoch-second timestamps.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Location"],
)

install_error_handlers(app)


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(repo: Repository = Depends(get_repository)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the active storage backend.
    """
    return {"message": "Healthy", "backend": repo.name}


# Include routers
app.include_router(tasks_router.router)
