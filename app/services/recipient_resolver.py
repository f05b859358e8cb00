"""
Resolução da audiência de um evento de notificação
"""
import logging
from typing import Set
from sqlalchemy.orm import Session
from app.models.device_token import DeviceToken
from app.models.profile import Profile
from app.utils.identity import exclude_actor, merge_user_ids

logger = logging.getLogger(__name__)


def _user_ids_with_active_tokens(db: Session) -> Set[str]:
    try:
        rows = db.query(DeviceToken.user_id).filter(
            DeviceToken.is_active.is_(True)
        ).distinct().all()
        return {row[0] for row in rows}
    except Exception as e:
        logger.warning(f"Could not fetch user IDs from device tokens: {e}")
        db.rollback()
        return set()


def _user_ids_from_profiles(db: Session) -> Set[str]:
    try:
        rows = db.query(Profile.id).distinct().all()
        return {row[0] for row in rows}
    except Exception as e:
        logger.warning(f"Could not fetch user IDs from profiles: {e}")
        db.rollback()
        return set()


def resolve_recipients(db: Session, actor_id: str) -> Set[str]:
    """
    Calcula os destinatários de uma notificação.

    União dos usuários com token ativo e dos usuários em profiles, menos o
    autor. Deduplicação e exclusão comparam IDs sem caixa e sem espaços.
    Se uma das fontes falhar ela conta como vazia; resultado vazio não é erro.

    Args:
        db: Sessão do banco de dados
        actor_id: ID do usuário que originou o evento

    Returns:
        set com os IDs dos destinatários
    """
    with_tokens = _user_ids_with_active_tokens(db)
    profiles = _user_ids_from_profiles(db)

    # Mesmo usuário com formatos diferentes conta uma vez; o formato do
    # registro de dispositivos tem preferência
    all_user_ids = merge_user_ids(with_tokens, profiles)
    recipients = exclude_actor(all_user_ids, actor_id)

    logger.info(
        f"Resolved {len(recipients)} recipients "
        f"({len(with_tokens)} with tokens, {len(profiles)} profiles, actor excluded: "
        f"{len(all_user_ids) - len(recipients)})"
    )
    return recipients
