from fastapi import APIRouter, Depends

from classroom.core.permissions import require_teacher
from classroom.models.user import User
from classroom.services.ai_feedback import OllamaClient, get_ai_client

router = APIRouter()


@router.get("/health")
def ai_health(
    teacher: User = Depends(require_teacher),
    ai: OllamaClient = Depends(get_ai_client),
):
    return ai.check_connection()
