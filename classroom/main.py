from contextlib import asynccontextmanager

from fastapi import FastAPI

from classroom.core.config import LOG_LEVEL
from classroom.core.errors import ClassroomError, classroom_error_handler
from classroom.core.logging_middleware import LoggingMiddleware, configure_logging
from classroom.db.init_db import init_db
from classroom.routers.ai import router as ai_router
from classroom.routers.announcements import router as announcements_router
from classroom.routers.assignments import router as assignments_router
from classroom.routers.classrooms import router as classrooms_router
from classroom.routers.performance import router as performance_router
from classroom.routers.subjects import router as subjects_router
from classroom.routers.submissions import router as submissions_router
from classroom.routers.teacher_dashboard import router as teacher_dashboard_router
from classroom.routers.users import router as users_router

configure_logging(LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Classroom API", lifespan=lifespan)

# Middleware
app.add_middleware(LoggingMiddleware)

# Domain failures -> {"kind", "detail"}
app.add_exception_handler(ClassroomError, classroom_error_handler)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(users_router, prefix="/users", tags=["users"])
app.include_router(classrooms_router, prefix="/classrooms", tags=["classrooms"])
app.include_router(subjects_router, prefix="/subjects", tags=["subjects"])
app.include_router(assignments_router, tags=["assignments"])
app.include_router(submissions_router, tags=["submissions"])
app.include_router(announcements_router, tags=["announcements"])
app.include_router(performance_router)
app.include_router(ai_router, prefix="/ai", tags=["ai"])

# Teacher dashboard (no prefix; route already defines full path)
app.include_router(teacher_dashboard_router)
