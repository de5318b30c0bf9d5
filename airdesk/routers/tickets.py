# airdesk/routers/tickets.py
from fastapi import APIRouter, Depends, Query

from airdesk.dependencies import get_current_user, get_db, require_admin
from airdesk.schemas.ticket import ReviewCreate, ReviewUpdate, TicketCreate, TicketStats, TicketUpdate
from airdesk.schemas.user import Identity
from airdesk.services import reporting
from airdesk.services import tickets as ticket_service

router = APIRouter(prefix="/tickets", tags=["Tickets"])


# -----------------------------
# LIST Tickets
# -----------------------------
@router.get("/my-tickets")
async def my_tickets(db=Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return await ticket_service.list_mine(db, current_user)


@router.get("/all")
async def all_tickets(db=Depends(get_db), current_user: Identity = Depends(require_admin)):
    return await ticket_service.list_all(db, current_user)


@router.get("/assigned-to-me")
async def assigned_to_me(db=Depends(get_db), current_user: Identity = Depends(require_admin)):
    return await ticket_service.list_assigned_to_me(db, current_user)


@router.get("/stats", response_model=TicketStats)
async def ticket_stats(
    group_by: str = Query("day", alias="groupBy"),
    db=Depends(get_db),
    current_user: Identity = Depends(require_admin),
):
    return await reporting.ticket_stats(db, group_by)


# -----------------------------
# GET Ticket Detail
# -----------------------------
@router.get("/my-tickets/{ticket_id}")
async def my_ticket_detail(ticket_id: str, db=Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return await ticket_service.get_mine(db, current_user, ticket_id)


# -----------------------------
# CREATE / UPDATE / DELETE Ticket
# -----------------------------
@router.post("", status_code=201)
async def create_ticket(data: TicketCreate, db=Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return await ticket_service.create(db, current_user, data)


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    db=Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    return await ticket_service.update(db, current_user, ticket_id, data)


@router.delete("/{ticket_id}")
async def delete_ticket(ticket_id: str, db=Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return await ticket_service.delete(db, current_user, ticket_id)


@router.put("/{ticket_id}/assign")
async def assign_ticket(ticket_id: str, db=Depends(get_db), current_user: Identity = Depends(require_admin)):
    return await ticket_service.assign(db, current_user, ticket_id)


# -----------------------------
# Reviews
# -----------------------------
@router.post("/{ticket_id}/reviews", status_code=201)
async def add_review(
    ticket_id: str,
    data: ReviewCreate,
    db=Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    return await ticket_service.add_review(db, current_user, ticket_id, data)


@router.put("/{ticket_id}/reviews/{review_id}")
async def update_review(
    ticket_id: str,
    review_id: str,
    data: ReviewUpdate,
    db=Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    return await ticket_service.update_review(db, current_user, ticket_id, review_id, data)


@router.delete("/{ticket_id}/reviews/{review_id}")
async def remove_review(
    ticket_id: str,
    review_id: str,
    db=Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    return await ticket_service.remove_review(db, current_user, ticket_id, review_id)
