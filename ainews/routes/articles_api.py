from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc, or_, func
from typing import Optional, List
from pydantic import BaseModel
from datetime import datetime

from ainews.models import get_db
from ainews.models.content import NewsArticle, TranslationStatus

router = APIRouter(prefix="/api/news", tags=["AI News API"])


class NewsResponse(BaseModel):
    id: int
    title: str
    summary: str
    content: str
    source_url: str
    source: Optional[str]
    category: str
    region: str
    published_at: Optional[datetime]
    content_extracted: bool
    translation_status: int
    title_zh: Optional[str]
    summary_zh: Optional[str]
    content_zh: Optional[str]
    excerpt: Optional[str] = None
    excerpt_zh: Optional[str] = None
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class NewsListResponse(BaseModel):
    news: List[NewsResponse]
    total: int
    limit: int
    offset: int
    has_more: bool


@router.get("", response_model=NewsListResponse)
async def list_news(
    limit: int = Query(default=20, le=100, ge=1),
    offset: int = Query(default=0, ge=0),
    region: Optional[str] = Query(default=None, description="domestic or international"),
    category: Optional[str] = Query(default=None, description="tech, product, industry, event, manufacturer"),
    q: Optional[str] = Query(default=None, min_length=1, description="Search in titles and summaries"),
    sort: str = Query(default="published", pattern="^(published|created)$"),
    db: Session = Depends(get_db)
):
    """
    List news, newest first.
    Search covers both the original and the translated title and summary.
    """
    base_query = db.query(NewsArticle)

    if region:
        base_query = base_query.filter(NewsArticle.region == region)
    if category:
        base_query = base_query.filter(NewsArticle.category == category)
    if q:
        search_term = f"%{q}%"
        base_query = base_query.filter(or_(
            NewsArticle.title.ilike(search_term),
            NewsArticle.summary.ilike(search_term),
            NewsArticle.title_zh.ilike(search_term),
            NewsArticle.summary_zh.ilike(search_term)
        ))

    total = base_query.count()

    order_column = NewsArticle.published_at if sort == "published" else NewsArticle.created_at
    news = base_query.order_by(desc(order_column), desc(NewsArticle.id)).offset(offset).limit(limit).all()

    return NewsListResponse(
        news=[NewsResponse.model_validate(article) for article in news],
        total=total,
        limit=limit,
        offset=offset,
        has_more=(offset + limit) < total
    )


@router.get("/stats")
async def news_stats(db: Session = Depends(get_db)):
    """Record counts by translation status and region"""
    by_status = dict(
        db.query(NewsArticle.translation_status, func.count(NewsArticle.id))
        .group_by(NewsArticle.translation_status).all()
    )
    by_region = dict(
        db.query(NewsArticle.region, func.count(NewsArticle.id))
        .group_by(NewsArticle.region).all()
    )

    return {
        "total": sum(by_region.values()),
        "by_region": by_region,
        "translation": {
            status.name.lower(): by_status.get(status.value, 0)
            for status in TranslationStatus
        }
    }


@router.get("/{news_id}", response_model=NewsResponse)
async def get_news(news_id: int, db: Session = Depends(get_db)):
    article = db.query(NewsArticle).filter(NewsArticle.id == news_id).first()

    if not article:
        raise HTTPException(status_code=404, detail="News not found")

    return article
