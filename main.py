import logging

from fastapi import FastAPI
from sqlalchemy.exc import IntegrityError
from starlette.middleware.cors import CORSMiddleware

# Register every mapped class before the first query
import services.user_management.models  # noqa: F401
import services.academics.models  # noqa: F401
import services.student_records.models  # noqa: F401
import services.scheduling.models  # noqa: F401

from services.user_management.api.auth_router import router as auth_router
from services.user_management.api.admin_user_router import router as admin_user_router
from services.academics.api.department_router import router as department_router
from services.academics.api.level_router import router as level_router
from services.academics.api.class_router import router as class_router
from services.academics.api.subject_router import router as subject_router
from services.academics.api.program_router import router as program_router
from services.academics.api.activity_router import router as activity_router
from services.student_records.api.grade_router import router as grade_router
from services.student_records.api.absence_router import router as absence_router
from services.scheduling.api.session_router import router as session_router
from shared.config import CORS_ORIGINS
from shared.errors import ServiceError, integrity_error_handler, service_error_handler
from shared.logging_setup import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="SchoolBase Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)


@app.get("/")
def health_check():
    return {"status": "SchoolBase Backend is running"}


app.include_router(auth_router)
app.include_router(admin_user_router)
app.include_router(department_router)
app.include_router(level_router)
app.include_router(class_router)
app.include_router(subject_router)
app.include_router(program_router)
app.include_router(activity_router)
app.include_router(grade_router)
app.include_router(absence_router)
app.include_router(session_router)
