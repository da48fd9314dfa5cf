from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TicketStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    WAITING_FOR_CUSTOMER = "Waiting for Customer"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class TicketPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


TERMINAL_STATUSES = (TicketStatus.RESOLVED.value, TicketStatus.CLOSED.value)
ACTIVE_STATUSES = tuple(s.value for s in TicketStatus if s.value not in TERMINAL_STATUSES)


# --- Tickets ---

class TicketCreate(BaseModel):
    customer_id: int
    title: str
    description: str
    priority: TicketPriority = TicketPriority.MEDIUM
    category_id: int | None = None


class TicketUpdate(BaseModel):
    """Partial update: only the fields present in the body are applied."""
    technician_id: int | None = None
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    resolution_notes: str | None = None
    category_id: int | None = None


class CommentCreate(BaseModel):
    technician_id: int
    comment_text: str
    is_internal: bool = True


class TicketRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: str | None
    title: str
    description: str
    priority: str
    status: str
    customer_id: int
    technician_id: int | None = None
    category_id: int | None = None
    resolution_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    closed_at: datetime | None = None


class TicketRow(TicketRead):
    company_name: str | None = None
    contact_name: str | None = None
    customer_email: str | None = None
    assigned_technician: str | None = None
    category_name: str | None = None


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int
    technician_id: int
    technician_name: str | None = None
    comment_text: str
    is_internal: bool
    created_at: datetime


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_id: int
    file_name: str
    file_url: str
    content_type: str | None = None
    size_bytes: int | None = None
    created_at: datetime


class TicketDetail(TicketRow):
    customer_phone: str | None = None
    comments: list[CommentRead] = Field(default_factory=list)
    attachments: list[AttachmentRead] = Field(default_factory=list)


# --- Customers ---

class CustomerCreate(BaseModel):
    company_name: str
    contact_name: str
    email: str
    phone: str | None = None
    address: str | None = None


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    contact_name: str
    email: str
    phone: str | None = None
    address: str | None = None
    created_at: datetime
    updated_at: datetime


class CustomerTicket(BaseModel):
    id: int
    ticket_number: str | None
    title: str
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime
    assigned_technician: str | None = None
    category_name: str | None = None


class CustomerDetail(CustomerRead):
    tickets: list[CustomerTicket] = Field(default_factory=list)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class CustomerPage(BaseModel):
    customers: list[CustomerRead]
    pagination: Pagination


# --- Technicians ---

class TechnicianCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None


class TechnicianUpdate(TechnicianCreate):
    is_active: bool = True


class TechnicianRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class AssignedTicket(BaseModel):
    id: int
    ticket_number: str | None
    title: str
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime
    company_name: str | None = None
    contact_name: str | None = None
    category_name: str | None = None


class TechnicianDetail(TechnicianRead):
    assigned_tickets: list[AssignedTicket] = Field(default_factory=list)


class TechnicianPage(BaseModel):
    technicians: list[TechnicianRead]
    pagination: Pagination


# --- Categories ---

class CategoryCreate(BaseModel):
    name: str
    description: str | None = None


class CategoryUpdate(CategoryCreate):
    is_active: bool = True


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime


# --- Aggregates ---

class StatusBreakdown(BaseModel):
    new_tickets: int = 0
    in_progress_tickets: int = 0
    waiting_tickets: int = 0
    resolved_tickets: int = 0
    closed_tickets: int = 0
    avg_resolution_time_hours: float | None = None


class CategoryTicketStats(StatusBreakdown):
    total_tickets: int = 0


class CategoryDetail(CategoryRead):
    ticket_stats: CategoryTicketStats


class TechnicianWorkload(StatusBreakdown):
    total_assigned_tickets: int = 0
    active_tickets: int = 0
    critical_tickets: int = 0
    high_priority_tickets: int = 0


class CustomerTicketStats(StatusBreakdown):
    total_tickets: int = 0
    critical_tickets: int = 0
    high_priority_tickets: int = 0


class TechnicianWorkloadRow(BaseModel):
    technician_id: int
    technician_name: str
    email: str
    is_active: bool
    total_assigned_tickets: int
    active_tickets: int
    critical_tickets: int
    high_priority_tickets: int
    avg_resolution_time_hours: float | None = None


class CategoryStatsRow(BaseModel):
    category_id: int
    category_name: str
    is_active: bool
    total_tickets: int
    active_tickets: int
    critical_tickets: int
    high_priority_tickets: int
    avg_resolution_time_hours: float | None = None

