import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from blog_api.database import get_db
from blog_api.schemas import PostCreate, PostListOut, PostOut, PostUpdate
from blog_api.services.repository import (
    create_post,
    delete_post,
    get_or_create_category,
    get_post,
    list_posts,
    update_post,
)
from blog_api.validation import MalformedBody, PayloadValidationError, validate_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["posts"])

POST_NOT_FOUND = "Post not found"
MAX_POST_ID = 2**31 - 1
LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)", re.ASCII)


def parse_post_id(raw: str) -> int | None:
    """Read the leading integer of ``raw`` ("12abc" is 12).

    Ids without one, or outside the id column range, are reported as missing
    posts, never as bad requests.
    """
    match = LEADING_INTEGER.match(raw)
    if not match:
        return None
    post_id = int(match.group(1))
    if abs(post_id) > MAX_POST_ID:
        return None
    return post_id


async def json_body(request: Request) -> Any:
    """Decode the JSON body without rejecting the request.

    Malformed bodies are handed to the handler so it can report them after
    the post lookup.
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return await request.json()
    except ValueError:
        return MalformedBody(raw.decode("utf-8", errors="replace"))


def _not_found() -> JSONResponse:
    return JSONResponse({"error": POST_NOT_FOUND}, status_code=404)


def _unprocessable(exc: PayloadValidationError) -> JSONResponse:
    return JSONResponse({"errors": exc.errors}, status_code=422)


@router.post("/posts", response_model=PostOut, status_code=201)
def api_create_post(payload: Any = Depends(json_body), db: Session = Depends(get_db)):
    try:
        values = validate_body(PostCreate, payload)
    except PayloadValidationError as exc:
        return _unprocessable(exc)

    category = get_or_create_category(db, values.category)
    post = create_post(
        db,
        title=values.title,
        content=values.content,
        image_url=values.image_url,
        category=category,
    )
    db.commit()
    logger.info("Created post %s in category '%s'", post.id, category.name)
    return post


@router.get("/posts", response_model=PostListOut)
def api_list_posts(db: Session = Depends(get_db)):
    return {"posts": list_posts(db)}


@router.get("/posts/{post_id}", response_model=PostOut)
def api_get_post(post_id: str, db: Session = Depends(get_db)):
    parsed_id = parse_post_id(post_id)
    post = get_post(db, parsed_id) if parsed_id is not None else None
    if not post:
        return _not_found()
    return post


@router.patch("/posts/{post_id}", response_model=PostOut)
def api_update_post(post_id: str, payload: Any = Depends(json_body), db: Session = Depends(get_db)):
    parsed_id = parse_post_id(post_id)
    post = get_post(db, parsed_id) if parsed_id is not None else None
    if not post:
        return _not_found()

    try:
        values = validate_body(PostUpdate, payload)
    except PayloadValidationError as exc:
        return _unprocessable(exc)

    changes = values.model_dump(exclude_unset=True)
    category_name = changes.pop("category", None)
    if category_name is not None:
        changes["category_id"] = get_or_create_category(db, category_name).id

    post = update_post(db, post, changes)
    db.commit()
    logger.info("Updated post %s (%s)", post.id, ", ".join(sorted(changes)) or "no changes")
    return post


@router.delete("/posts/{post_id}", status_code=204, response_class=Response)
def api_delete_post(post_id: str, db: Session = Depends(get_db)):
    parsed_id = parse_post_id(post_id)
    post = get_post(db, parsed_id) if parsed_id is not None else None
    if not post:
        return _not_found()
    delete_post(db, post)
    db.commit()
    logger.info("Deleted post %s", parsed_id)
    return Response(status_code=204)
