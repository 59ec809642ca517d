"""
Modelos SQLAlchemy — camada de Infraestrutura.

Tabelas:
  - accounts                 (espelho mínimo do provedor de identidade)
  - maintenance_statuses     (catálogo de status)
  - maintenance_priorities   (catálogo de prioridades)
  - maintenance_tickets      (ticket + log de observações)
  - maintenance_attachments  (referências a arquivos, insert-only)
  - maintenance_events       (log de eventos, insert-only)
  - notification_reads       (marcadores de leitura por conta)
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    func,
)

from sibol.infrastructure.database.session import Base


# ────────────────────────────────────────────────────────────────
# ACCOUNTS
# ────────────────────────────────────────────────────────────────
class AccountModel(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(150), unique=True, nullable=False, index=True)
    first_name = Column(String(150), nullable=False, server_default="")
    last_name = Column(String(150), nullable=False, server_default="")
    role = Column(SmallInteger, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# ────────────────────────────────────────────────────────────────
# CATÁLOGO
# ────────────────────────────────────────────────────────────────
class MaintenanceStatusModel(Base):
    __tablename__ = "maintenance_statuses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)


class MaintenancePriorityModel(Base):
    __tablename__ = "maintenance_priorities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)


# ────────────────────────────────────────────────────────────────
# TICKETS
# ────────────────────────────────────────────────────────────────
class MaintenanceTicketModel(Base):
    __tablename__ = "maintenance_tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    details = Column(Text, nullable=True)
    priority_id = Column(Integer, ForeignKey("maintenance_priorities.id"), nullable=True)
    status_id = Column(Integer, ForeignKey("maintenance_statuses.id"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    assigned_to = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    due_date = Column(Date, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


# ────────────────────────────────────────────────────────────────
# EVENTOS (append-only)
# ────────────────────────────────────────────────────────────────
class MaintenanceEventModel(Base):
    __tablename__ = "maintenance_events"

    __table_args__ = (
        Index("ix_maintenance_events_ticket_id_created_at", "ticket_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("maintenance_tickets.id"), nullable=False)
    event_type = Column(String(50), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)


# ────────────────────────────────────────────────────────────────
# ANEXOS
# ────────────────────────────────────────────────────────────────
class MaintenanceAttachmentModel(Base):
    __tablename__ = "maintenance_attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("maintenance_tickets.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("maintenance_events.id"), nullable=True, index=True)
    uploaded_by = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    file_path = Column(String(1000), nullable=False)
    file_name = Column(String(500), nullable=False)
    file_type = Column(String(150), nullable=True)
    file_size = Column(Integer, nullable=True)
    folder = Column(String(150), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ────────────────────────────────────────────────────────────────
# MARCADORES DE LEITURA
# ────────────────────────────────────────────────────────────────
class NotificationReadModel(Base):
    __tablename__ = "notification_reads"

    __table_args__ = (
        UniqueConstraint(
            "account_id", "notification_type", "notification_id",
            name="uq_notification_reads_account_type_id",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    notification_type = Column(String(30), nullable=False)
    notification_id = Column(Integer, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
