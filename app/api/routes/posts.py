from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_viewer_id, get_visitor_country, require_user_id
from app.api.models import (
    AccessResponse,
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from app.db.models.posts import Post
from app.db.session import SessionLocal
from app.paywall.entitlements.access import AccessService
from app.paywall.posts.errors import PostNotFoundError, PostPermissionError, PostValidationError
from app.paywall.posts.service import PostService

router = APIRouter(tags=["posts"])


def _as_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        creator_id=post.creator_id,
        title=post.title,
        body=post.body,
        visibility=post.visibility,
        price_cents=post.price_cents,
        is_deleted=post.is_deleted,
        created_at=post.created_at,
    )


@router.get("/api/posts/{post_id}/access", response_model=AccessResponse)
async def check_post_access(
    post_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
    visitor_country: str | None = Depends(get_visitor_country),
) -> AccessResponse:
    async with SessionLocal.begin() as session:
        decision = await AccessService.check_access(
            session,
            viewer_id=viewer_id,
            post_id=post_id,
            visitor_country=visitor_country,
            now_utc=datetime.now(timezone.utc),
        )
    return AccessResponse(can_view=decision.can_view, found=decision.found)


@router.get("/api/creators/{creator_id}/posts", response_model=PostListResponse)
async def list_creator_posts(
    creator_id: UUID,
    limit: int = Query(default=50, ge=1, le=100),
    viewer_id: UUID | None = Depends(get_viewer_id),
    visitor_country: str | None = Depends(get_visitor_country),
) -> PostListResponse:
    async with SessionLocal.begin() as session:
        items = await PostService.list_creator_posts(
            session,
            creator_id=creator_id,
            viewer_id=viewer_id,
            visitor_country=visitor_country,
            now_utc=datetime.now(timezone.utc),
            limit=limit,
        )
    return PostListResponse(
        posts=[
            PostResponse(
                id=item.post_id,
                creator_id=item.creator_id,
                title=item.title,
                body=item.body,
                visibility=item.visibility,
                price_cents=item.price_cents,
                is_deleted=item.is_deleted,
                created_at=item.created_at,
                can_view=item.can_view,
            )
            for item in items
        ]
    )


@router.post("/api/posts", response_model=PostResponse, status_code=201)
async def create_post(
    payload: PostCreateRequest,
    user_id: UUID = Depends(require_user_id),
) -> PostResponse:
    try:
        async with SessionLocal.begin() as session:
            post = await PostService.create_post(
                session,
                creator_id=user_id,
                title=payload.title,
                body=payload.body,
                visibility=payload.visibility,
                price_cents=payload.price_cents,
                now_utc=datetime.now(timezone.utc),
            )
    except PostPermissionError as exc:
        raise HTTPException(status_code=403, detail={"code": "E_NOT_CREATOR"}) from exc
    except PostValidationError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_POST_INVALID"}) from exc
    return _as_post_response(post)


@router.patch("/api/posts/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: UUID,
    payload: PostUpdateRequest,
    user_id: UUID = Depends(require_user_id),
) -> PostResponse:
    try:
        async with SessionLocal.begin() as session:
            post = await PostService.update_post_content(
                session,
                creator_id=user_id,
                post_id=post_id,
                title=payload.title,
                body=payload.body,
                now_utc=datetime.now(timezone.utc),
            )
    except (PostNotFoundError, PostPermissionError) as exc:
        raise HTTPException(status_code=404, detail={"code": "E_POST_NOT_FOUND"}) from exc
    except PostValidationError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_POST_INVALID"}) from exc
    return _as_post_response(post)


@router.delete("/api/posts/{post_id}", response_model=PostResponse)
async def delete_post(
    post_id: UUID,
    user_id: UUID = Depends(require_user_id),
) -> PostResponse:
    try:
        async with SessionLocal.begin() as session:
            post = await PostService.soft_delete_post(
                session,
                creator_id=user_id,
                post_id=post_id,
                now_utc=datetime.now(timezone.utc),
            )
    except (PostNotFoundError, PostPermissionError) as exc:
        raise HTTPException(status_code=404, detail={"code": "E_POST_NOT_FOUND"}) from exc
    return _as_post_response(post)
