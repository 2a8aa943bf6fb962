from fastapi import APIRouter, Depends

from academia.core.current_user import get_current_user
from academia.core.deps import get_ai_service, get_storage
from academia.core.permissions import require_staff
from academia.models.user import User
from academia.schemas.ai import AIResultOut, RecommendationRequest, SyllabusRequest
from academia.services.ai import AIService
from academia.services.storage import Storage

router = APIRouter()


@router.post("/ai/recommend", response_model=AIResultOut)
def recommend_courses(
    payload: RecommendationRequest,
    storage: Storage = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
    me: User = Depends(get_current_user),
):
    result = ai.generate_course_recommendations(
        payload.interests,
        level=payload.level,
        existing_courses=payload.existing_courses,
    )
    storage.save_recommendations(me.id, payload.interests, result.source, result.data)
    return {"source": result.source, "data": result.data}


@router.post("/ai/syllabus", response_model=AIResultOut)
def generate_syllabus(
    payload: SyllabusRequest,
    storage: Storage = Depends(get_storage),
    ai: AIService = Depends(get_ai_service),
    staff: User = Depends(require_staff),
):
    result = ai.generate_syllabus(
        payload.course_title,
        payload.course_description,
        payload.duration,
        payload.credits,
    )
    storage.save_syllabus(
        staff.id,
        payload.course_title,
        payload.course_description,
        payload.duration,
        payload.credits,
        result.source,
        result.data,
    )
    return {"source": result.source, "data": result.data}
