from pydantic import BaseModel, ConfigDict
from typing import Optional
import uuid
from datetime import datetime

from app.db.models.document import DocumentSource


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    date_publication: datetime
    type_document: str
    source: DocumentSource
    type_avis: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    contenu: Optional[str] = None
    lien_document: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Схема для ответа с ошибкой"""
    error: str
    message: str
