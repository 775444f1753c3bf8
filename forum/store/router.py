"""
Read-only store endpoints.

Inputs are constrained with `Query` so none of these calls can hit a data
store precondition.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from .dependencies import get_store
from .schemas import PopularTagsResponse, QuestionSummary, SearchResponse
from .service import DataStore

router = APIRouter()


@router.get("/questions/recent", response_model=list[QuestionSummary])
async def recent_questions(
    count: int = Query(10, ge=0, le=100),
    store: DataStore = Depends(get_store),
) -> list[QuestionSummary]:
    return await store.list_recent_questions(count)


@router.get("/questions/search", response_model=SearchResponse)
async def search_questions(
    q: str = Query(..., min_length=1),
    store: DataStore = Depends(get_store),
) -> SearchResponse:
    questions = await store.search_questions(q)
    tags = await store.get_tags_for_questions(questions)
    return SearchResponse(query=q, questions=questions, tags=tags)


@router.get("/tags/popular", response_model=PopularTagsResponse)
async def popular_tags(
    q: str = "",
    store: DataStore = Depends(get_store),
) -> PopularTagsResponse:
    return PopularTagsResponse(query=q, tags=await store.get_popular_tags(q))
