"""
Schemas Pydantic — camada de Apresentação.

Respostas de tickets, anexos, trilha de eventos e notificações, além do
error model usado na documentação OpenAPI.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


# ════════════════════════════════════════════════════════════════
# ERROR MODEL (para Swagger docs)
# ════════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    error: str = Field(..., examples=["conflict"])
    detail: str = Field(..., examples=["Transição inválida: 'accept' a partir de 'Completed'"])
    request_id: Optional[str] = None

    model_config = {"json_schema_extra": {"example": {"error": "not_found", "detail": "Ticket 42 não encontrado", "request_id": "a1b2c3d4"}}}


# ════════════════════════════════════════════════════════════════
# MAINTENANCE
# ════════════════════════════════════════════════════════════════
class AttachmentOut(BaseModel):
    id: int
    ticket_id: int
    event_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    file_path: str
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    folder: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TicketOut(BaseModel):
    id: int
    title: str
    details: Optional[str] = None
    status: str = Field(..., examples=["On-going"])
    priority: Optional[str] = Field(None, examples=["Urgent"])
    created_by: Optional[int] = None
    assigned_to: Optional[int] = None
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    attachment_count: int = 0
    attachments: list[AttachmentOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class TicketEventOut(BaseModel):
    id: int
    ticket_id: int
    event_type: str = Field(..., examples=["ACCEPTED"])
    actor_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TicketHistoryOut(BaseModel):
    ticket_id: int
    status: str
    replayed_status: Optional[str] = Field(None, description="Status reconstruído a partir do log de eventos")
    events: list[TicketEventOut]

    model_config = {"from_attributes": True}


class PriorityOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


# ════════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ════════════════════════════════════════════════════════════════
class NotificationOut(BaseModel):
    id: int
    type: str = Field(..., examples=["maintenance"])
    title: str = Field(..., examples=["Maintenance accepted: Request #12"])
    message: str = Field(..., examples=["Maria Santos sent a accepted in Broken drum at Purok 3."])
    timestamp: Optional[datetime] = None
    read: bool
    ticket_id: Optional[int] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    event_type: Optional[str] = None

    model_config = {"from_attributes": True}


class MarkReadRequest(BaseModel):
    type: str = Field(..., examples=["maintenance"])
    id: int = Field(..., ge=1, examples=[42])


class MarkAllReadRequest(BaseModel):
    type: str = Field(default="maintenance", examples=["maintenance"])


class MarkReadOut(BaseModel):
    success: bool = True
    marked: int = Field(0, description="Marcadores criados nesta chamada")

    model_config = {"from_attributes": True}
