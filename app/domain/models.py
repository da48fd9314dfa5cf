from __future__ import annotations

from typing import Optional
from datetime import datetime, timezone
from uuid import uuid4
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    # Naive UTC, what SQLite and SQL Server DATETIME columns hand back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Customer(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    company_name: str = Field(index=True)
    contact_name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    address: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Technician(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    first_name: str
    last_name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)
    description: Optional[str] = None
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class Ticket(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Final value is derived from the primary key inside the creating transaction
    ticket_number: str = Field(default_factory=lambda: f"PENDING-{uuid4().hex}", index=True, unique=True, max_length=48)

    title: str
    description: str

    status: str = Field(default="New", index=True)
    priority: str = Field(default="Medium", index=True)

    customer_id: int = Field(foreign_key="customer.id", index=True)
    technician_id: Optional[int] = Field(default=None, foreign_key="technician.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)

    resolution_notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow, index=True)
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None


class TicketComment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="ticket.id", index=True)
    technician_id: int = Field(foreign_key="technician.id", index=True)
    comment_text: str
    is_internal: bool = True
    created_at: datetime = Field(default_factory=utcnow, index=True)


class TicketAttachment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="ticket.id", index=True)
    file_name: str
    file_url: str
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
