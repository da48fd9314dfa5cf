from __future__ import annotations

from typing import Optional, Any

from fastapi.encoders import jsonable_encoder
from mcp.server.fastmcp import FastMCP

from app.db.engine import Database
from app.domain.errors import HelpdeskError
from app.domain.schemas import TicketPriority, TicketStatus
from app.services import ticket_service, workload_service


def update_fields(
    *,
    unassign_technician: bool = False,
    clear_category: bool = False,
    **fields: Any,
) -> dict[str, Any]:
    """Tool arguments -> update_ticket kwargs. None means "not supplied"; the flags send an explicit null."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if unassign_technician:
        changes["technician_id"] = None
    if clear_category:
        changes["category_id"] = None
    return changes


def build_mcp(database: Database) -> FastMCP:
    """MCP tools over the same services as the REST API, bound to one Database."""

    # Streamable HTTP + stateless + JSON response
    mcp = FastMCP(
        name="Helpdesk",
        stateless_http=True,
        json_response=True,
        instructions=(
            "Helpdesk MCP server: ticket lifecycle tools (list, detail, create, "
            "partial update, comments) and technician/category workload views."
        ),
    )
    mcp.settings.streamable_http_path = "/"

    def _call(fn, *args, **kwargs) -> Any:
        with database.session() as s:
            try:
                return jsonable_encoder(fn(s, *args, **kwargs))
            except HelpdeskError as e:
                return e.to_body()

    @mcp.tool()
    def list_tickets(
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        customer_id: Optional[int] = None,
        technician_id: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> list[dict[str, Any]] | dict[str, Any]:
        """List tickets, newest first, filterable."""
        return _call(
            ticket_service.list_tickets,
            status=status,
            priority=priority,
            customer_id=customer_id,
            technician_id=technician_id,
            page=max(page, 1),
            limit=min(max(limit, 1), 100),
        )

    @mcp.tool()
    def get_ticket(ticket_id: int) -> dict[str, Any]:
        """Get one ticket with its comments and attachments."""
        return _call(ticket_service.get_ticket_detail, ticket_id)

    @mcp.tool()
    def create_ticket(
        customer_id: int,
        title: str,
        description: str,
        priority: TicketPriority = TicketPriority.MEDIUM,
        category_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Create a ticket in status New."""
        return _call(
            ticket_service.create_ticket,
            customer_id=customer_id,
            title=title,
            description=description,
            priority=priority,
            category_id=category_id,
        )

    @mcp.tool()
    def update_ticket(
        ticket_id: int,
        technician_id: Optional[int] = None,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        resolution_notes: Optional[str] = None,
        category_id: Optional[int] = None,
        unassign_technician: bool = False,
        clear_category: bool = False,
    ) -> dict[str, Any]:
        """
        Partial ticket update; omitted fields are left unchanged.
        Set unassign_technician / clear_category to remove the technician or category.
        """
        return _call(
            ticket_service.update_ticket,
            ticket_id,
            **update_fields(
                technician_id=technician_id,
                status=status,
                priority=priority,
                resolution_notes=resolution_notes,
                category_id=category_id,
                unassign_technician=unassign_technician,
                clear_category=clear_category,
            ),
        )

    @mcp.tool()
    def add_comment(ticket_id: int, technician_id: int, comment_text: str, is_internal: bool = True) -> dict[str, Any]:
        """Append a comment to a ticket."""
        return _call(
            ticket_service.add_comment,
            ticket_id,
            technician_id=technician_id,
            comment_text=comment_text,
            is_internal=is_internal,
        )

    @mcp.tool()
    def technician_workload_summary() -> list[dict[str, Any]] | dict[str, Any]:
        """Workload per active technician, busiest first."""
        return _call(workload_service.technician_workload_summary)

    @mcp.tool()
    def category_stats_overview() -> list[dict[str, Any]] | dict[str, Any]:
        """Ticket statistics per active category."""
        return _call(workload_service.category_stats_overview)

    return mcp
