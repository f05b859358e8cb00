"""
Schemas do contrato da edge function de push
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


class SendPushRequest(BaseModel):
    """
    Corpo do POST. Campos são opcionais aqui para que a validação de
    campos obrigatórios devolva o erro do contrato (400) e não um 422.
    """
    user_ids: Optional[List[str]] = Field(default=None, alias="userIds")
    title: Optional[str] = None
    body: Optional[str] = None
    type: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)
