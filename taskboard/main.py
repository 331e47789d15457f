# taskboard/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.config import FRONTEND_ORIGIN, LOG_LEVEL
from taskboard.errors import register_error_handlers
from taskboard.logging_setup import setup_logging

logger = logging.getLogger("taskboard")

# ---------------- CORS ----------------
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if FRONTEND_ORIGIN:
    origins.append(FRONTEND_ORIGIN)


def create_app(*, configure_logging: bool = True, create_tables: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    if configure_logging:
        setup_logging(LOG_LEVEL)

    app = FastAPI(title="Taskboard API", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # ---------------- DATABASE INIT ----------------
    from taskboard.database import Base, engine  # noqa: E402
    import taskboard.models  # noqa: F401

    if create_tables:
        logger.info("Checking database models...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database ready.")

    # ---------------- ROUTERS ----------------
    from taskboard.attachment.attachment_router import files_router, router as attachment_router  # noqa: E402
    from taskboard.auth.auth_router import router as auth_router  # noqa: E402
    from taskboard.dashboard.dashboard_router import router as dashboard_router  # noqa: E402
    from taskboard.project.project_router import router as project_router  # noqa: E402
    from taskboard.task.task_router import router as task_router  # noqa: E402

    app.include_router(auth_router, prefix="/auth")
    # the rest carry their own /api/... prefix
    app.include_router(task_router)
    app.include_router(attachment_router)
    app.include_router(files_router)
    app.include_router(project_router)
    app.include_router(dashboard_router)

    # ---------------- ROOT ----------------
    @app.get("/")
    def read_root():
        return {"message": "Backend running successfully"}

    return app


def run() -> None:
    """Run the development server."""
    import uvicorn

    uvicorn.run("taskboard.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
