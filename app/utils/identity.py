"""
Normalização e comparação de IDs de usuário.

O provedor de identidade nem sempre devolve o mesmo formato (caixa, espaços),
então toda comparação com o autor do evento passa por aqui.
"""
from typing import Dict, Iterable, Optional, Set


def normalize_user_id(user_id: Optional[str]) -> str:
    """Remove espaços das pontas e converte para minúsculas."""
    if user_id is None:
        return ""
    return str(user_id).strip().lower()


def same_user(a: Optional[str], b: Optional[str]) -> bool:
    na = normalize_user_id(a)
    return bool(na) and na == normalize_user_id(b)


def merge_user_ids(*sources: Iterable[str]) -> Set[str]:
    """
    Une as fontes de IDs deduplicando pelo ID normalizado. Quando o mesmo
    usuário aparece com formatos diferentes vale o formato da primeira fonte.
    """
    merged: Dict[str, str] = {}
    for source in sources:
        for uid in source:
            key = normalize_user_id(uid)
            if key and key not in merged:
                merged[key] = uid
    return set(merged.values())


def exclude_actor(user_ids: Iterable[str], actor_id: Optional[str]) -> Set[str]:
    """
    Retorna os IDs (sem IDs vazios) excluindo o autor do evento.
    Os valores retornados mantêm o formato original de cada ID.
    """
    actor = normalize_user_id(actor_id)
    return {
        uid for uid in user_ids
        if normalize_user_id(uid) and normalize_user_id(uid) != actor
    }
