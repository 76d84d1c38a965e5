import logging

from fastapi import FastAPI

from portal.core.config import LOG_LEVEL
from portal.core.logging_middleware import LoggingMiddleware
from portal.db.init_db import init_db
from portal.routers.classrooms import router as classrooms_router
from portal.routers.grade_summary import router as grade_summary_router
from portal.routers.grades import router as grades_router
from portal.routers.modules import router as modules_router
from portal.routers.rubrics import router as rubrics_router
from portal.routers.submissions import router as submissions_router
from portal.routers.users import router as users_router

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

app = FastAPI(title="School Portal")

# Middleware
app.add_middleware(LoggingMiddleware)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(classrooms_router, prefix="/classrooms", tags=["classrooms"])
app.include_router(submissions_router, tags=["submissions"])
app.include_router(grades_router, tags=["grades"])
app.include_router(modules_router, tags=["modules"])
app.include_router(rubrics_router, tags=["rubrics"])

# Grade summaries (no prefix: routes define full paths)
app.include_router(grade_summary_router, tags=["grade-summary"])
