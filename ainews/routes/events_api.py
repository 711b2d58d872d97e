from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import and_, asc, or_
from typing import Optional, List
from pydantic import BaseModel
from datetime import datetime

from ainews.models import get_db
from ainews.models.content import IndustryEvent
from ainews.utils.text import utcnow

router = APIRouter(prefix="/api/events", tags=["AI Events API"])


class EventResponse(BaseModel):
    id: int
    name: str
    description: str
    url: Optional[str]
    source: Optional[str]
    category: str
    region: str
    start_date: datetime
    end_date: Optional[datetime]
    location: Optional[str]
    type: str
    registration_url: Optional[str]
    speakers: Optional[str]
    agenda: Optional[str]
    expected_attendees: Optional[int]

    class Config:
        from_attributes = True


class EventsListResponse(BaseModel):
    events: List[EventResponse]
    total: int
    limit: int
    offset: int
    has_more: bool


@router.get("", response_model=EventsListResponse)
async def list_events(
    limit: int = Query(default=20, le=100, ge=1),
    offset: int = Query(default=0, ge=0),
    region: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None, description="online or offline"),
    q: Optional[str] = Query(default=None, min_length=1),
    sort: str = Query(default="start_date", pattern="^(start_date|location)$"),
    upcoming: bool = Query(default=False, description="Only events that have not ended yet"),
    db: Session = Depends(get_db)
):
    base_query = db.query(IndustryEvent)

    if region:
        base_query = base_query.filter(IndustryEvent.region == region)
    if type:
        base_query = base_query.filter(IndustryEvent.type == type)
    if q:
        search_term = f"%{q}%"
        base_query = base_query.filter(or_(
            IndustryEvent.name.ilike(search_term),
            IndustryEvent.description.ilike(search_term),
            IndustryEvent.location.ilike(search_term)
        ))
    if upcoming:
        now = utcnow()
        base_query = base_query.filter(or_(
            IndustryEvent.end_date >= now,
            and_(IndustryEvent.end_date.is_(None), IndustryEvent.start_date >= now)
        ))

    total = base_query.count()

    order_column = IndustryEvent.start_date if sort == "start_date" else IndustryEvent.location
    events = base_query.order_by(asc(order_column), asc(IndustryEvent.id)).offset(offset).limit(limit).all()

    return EventsListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total
    )


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, db: Session = Depends(get_db)):
    event = db.query(IndustryEvent).filter(IndustryEvent.id == event_id).first()

    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    return event
