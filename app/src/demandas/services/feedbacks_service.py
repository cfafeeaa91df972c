from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from demandas.models import Feedback
from demandas.schemas import FeedbackCreate


def create_feedback(db: Session, data: FeedbackCreate, gestor_padrao: int) -> Feedback:
    feedback = Feedback(
        funcionario_id=data.funcionario_id,
        gestor_id=data.gestor_id or gestor_padrao,
        tipo=data.tipo,
        mensagem=data.mensagem,
        data_criacao=datetime.now(timezone.utc),
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    return feedback


def list_feedbacks(db: Session, funcionario_id: int | None = None) -> list[Feedback]:
    query = select(Feedback)
    if funcionario_id is not None:
        query = query.where(Feedback.funcionario_id == funcionario_id)
    return db.execute(query.order_by(Feedback.data_criacao.desc(), Feedback.id.desc())).scalars().all()
