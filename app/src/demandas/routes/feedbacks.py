from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from demandas.db import get_db
from demandas.errors import bad_request, storage_error
from demandas.schemas import FeedbackCreate, feedback_to_dict, primeira_mensagem
from demandas.services.feedbacks_service import create_feedback, list_feedbacks
from demandas.settings import settings

router = APIRouter()


@router.post("/feedbacks", status_code=status.HTTP_201_CREATED)
def api_create_feedback(
    db: Annotated[Session, Depends(get_db)],
    payload: Annotated[dict[str, Any], Body()],
):
    try:
        data = FeedbackCreate.model_validate(payload)
    except ValidationError as exc:
        raise bad_request(primeira_mensagem(exc))

    try:
        feedback = create_feedback(db, data, settings.DEFAULT_GESTOR_ID)
    except SQLAlchemyError as exc:
        db.rollback()
        raise storage_error(exc)
    return {"success": True, "feedback": feedback_to_dict(feedback)}


@router.get("/feedbacks")
def api_list_feedbacks(
    db: Annotated[Session, Depends(get_db)],
    funcionario_id: Annotated[int | None, Query(alias="funcionarioId")] = None,
):
    return {"success": True, "data": [feedback_to_dict(item) for item in list_feedbacks(db, funcionario_id)]}
