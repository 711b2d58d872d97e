"""
Admin routes for the ingestion backend
Protected by the X-Admin-Key header
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import secrets
import logging

from ainews.config import settings
from ainews.models import get_db
from ainews.models.content import CATEGORIES, FAMILIES, REGIONS, NewsArticle, Source
from ainews.services.content_extractor import extract_article_content, extract_multiple_articles
from ainews.services.excerpt_generator import excerpt_generator
from ainews.services.pipeline import ingestion_pipeline
from ainews.services.source_registry import validate_source_kind
from ainews.services.storage import news_storage
from ainews.services.translation_orchestrator import translation_orchestrator

logger = logging.getLogger(__name__)


def verify_admin_key(request: Request):
    expected = settings.ADMIN_API_KEY
    key = request.headers.get("X-Admin-Key", "")
    if expected and secrets.compare_digest(key, expected):
        return True
    raise HTTPException(status_code=403, detail="Access denied")


router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(verify_admin_key)])


class SourceCreate(BaseModel):
    name: str
    endpoint: str
    region: str = "international"
    fetch_kind: str = "feed"
    family: str = "news"
    category: str = "tech"
    description: Optional[str] = None
    keyword_filter: bool = True
    extract_body: bool = True
    item_selector: Optional[str] = None
    is_active: bool = True


class SourceUpdate(BaseModel):
    name: Optional[str] = None
    endpoint: Optional[str] = None
    region: Optional[str] = None
    fetch_kind: Optional[str] = None
    family: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    keyword_filter: Optional[bool] = None
    extract_body: Optional[bool] = None
    item_selector: Optional[str] = None
    is_active: Optional[bool] = None


class SourceResponse(BaseModel):
    id: int
    name: str
    endpoint: str
    description: Optional[str]
    region: str
    fetch_kind: str
    family: str
    category: str
    keyword_filter: bool
    extract_body: bool
    item_selector: Optional[str]
    is_active: bool
    last_fetched_at: Optional[datetime]
    success_count: int
    failure_count: int
    total_items_count: int
    last_error: Optional[str]

    class Config:
        from_attributes = True


def _validate_source(region: str, family: str, fetch_kind: str, category: str):
    if region not in REGIONS:
        raise HTTPException(status_code=400, detail=f"Invalid region '{region}'")
    if category not in CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Invalid category '{category}'")
    error = validate_source_kind(family, fetch_kind)
    if error:
        raise HTTPException(status_code=400, detail=error)


# Pipeline triggers

@router.post("/pipeline/{family}/run")
def trigger_pipeline(family: str):
    """Run one source family now; blocks until the run finishes"""
    if family not in FAMILIES:
        raise HTTPException(status_code=404, detail=f"Unknown family '{family}'")

    report = ingestion_pipeline.run_family(family)

    if report.skipped_busy:
        raise HTTPException(status_code=409, detail=f"{family} run already in progress")

    return {
        "success": True,
        "family": family,
        "fetched": report.fetched,
        "saved": report.saved,
        "updated": report.updated,
        "failed": report.failed,
        "skipped": report.skipped,
        "aborted": report.aborted,
    }


@router.post("/translation/run")
def trigger_translation():
    report = translation_orchestrator.run_translation_sweep()

    if report.skipped_busy:
        raise HTTPException(status_code=409, detail="Translation sweep already in progress")

    return {
        "success": True,
        "claimed": report.claimed,
        "translated": report.translated,
        "failed": report.failed,
        "superseded": report.superseded,
        "aborted": report.aborted,
    }


@router.post("/translation/requeue")
def trigger_requeue():
    count = translation_orchestrator.requeue_failed()
    return {"success": True, "requeued": count}


@router.post("/excerpts/run")
def trigger_excerpts():
    report = excerpt_generator.run_excerpt_sweep()
    return {
        "success": True,
        "candidates": report.candidates,
        "generated": report.generated,
        "fallback": report.fallback,
        "aborted": report.aborted,
    }


# Source registry

@router.get("/sources", response_model=List[SourceResponse])
async def list_sources(family: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(Source)
    if family:
        query = query.filter(Source.family == family)
    return query.order_by(Source.id).all()


@router.post("/sources", response_model=SourceResponse, status_code=201)
async def create_source(payload: SourceCreate, db: Session = Depends(get_db)):
    _validate_source(payload.region, payload.family, payload.fetch_kind, payload.category)

    if db.query(Source).filter(Source.endpoint == payload.endpoint).first():
        raise HTTPException(status_code=409, detail="A source with this endpoint already exists")

    source = Source(**payload.model_dump())
    db.add(source)
    db.commit()
    db.refresh(source)
    logger.info(f"Source created: {source.name} ({source.family}/{source.fetch_kind})")
    return source


@router.put("/sources/{source_id}", response_model=SourceResponse)
async def update_source(source_id: int, payload: SourceUpdate, db: Session = Depends(get_db)):
    source = db.query(Source).filter(Source.id == source_id).first()
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")

    changes = payload.model_dump(exclude_unset=True)
    _validate_source(
        changes.get("region", source.region),
        changes.get("family", source.family),
        changes.get("fetch_kind", source.fetch_kind),
        changes.get("category", source.category),
    )

    for name, value in changes.items():
        setattr(source, name, value)

    db.commit()
    db.refresh(source)
    return source


@router.delete("/sources/{source_id}")
async def delete_source(source_id: int, db: Session = Depends(get_db)):
    source = db.query(Source).filter(Source.id == source_id).first()
    if not source:
        raise HTTPException(status_code=404, detail="Source not found")

    db.delete(source)
    db.commit()
    logger.info(f"Source deleted: {source_id}")
    return {"success": True, "id": source_id}


# Corrections

class RefetchRequest(BaseModel):
    ids: Optional[List[int]] = None
    limit: int = 20


@router.post("/news/refetch")
def refetch_missing_content(body: RefetchRequest):
    """
    Re-extract bodies for several articles at once. Without explicit ids it
    picks the newest articles whose body is still the feed summary.
    """
    limit = max(1, min(body.limit, 100))
    targets = news_storage.find_news_for_refetch(body.ids, limit)
    if not targets:
        return {"success": True, "requested": 0, "updated": 0}

    contents = extract_multiple_articles([url for _, url in targets])

    updated = 0
    for news_id, url in targets:
        content = contents.get(url)
        if not content:
            continue
        news_storage.update_news_content(news_id, content=content, content_extracted=True)
        updated += 1

    logger.info(f"Bulk refetch: {updated}/{len(targets)} articles updated")
    return {"success": True, "requested": len(targets), "updated": updated}


@router.post("/news/{news_id}/refetch")
def refetch_news_content(news_id: int, db: Session = Depends(get_db)):
    """Re-extract the article body; translations are left untouched"""
    article = db.query(NewsArticle).filter(NewsArticle.id == news_id).first()
    if not article:
        raise HTTPException(status_code=404, detail="News not found")

    url = article.source_url
    db.close()

    content = extract_article_content(url)
    if not content:
        return {"success": False, "id": news_id, "message": "No usable content extracted"}

    news_storage.update_news_content(news_id, content=content, content_extracted=True)
    return {"success": True, "id": news_id, "content_length": len(content)}


@router.delete("/news/{news_id}")
async def delete_news(news_id: int, db: Session = Depends(get_db)):
    article = db.query(NewsArticle).filter(NewsArticle.id == news_id).first()
    if not article:
        raise HTTPException(status_code=404, detail="News not found")

    db.delete(article)
    db.commit()
    return {"success": True, "id": news_id}
