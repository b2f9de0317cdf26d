from fastapi import APIRouter

from volugram.modules.auth import router as auth_router
from volugram.modules.forms import router as forms_router
from volugram.modules.submissions import review_router, router as submissions_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(forms_router, prefix="/forms", tags=["Forms"])

api_router.include_router(submissions_router, prefix="/submissions", tags=["Submissions"])

api_router.include_router(
    review_router,
    prefix="/review/submissions",
    tags=["Review"],
)
