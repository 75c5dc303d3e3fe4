import logging
from typing import Any

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, defer

from blog_api.models import Category, Post

logger = logging.getLogger(__name__)


def _join_category(stmt: Select) -> Select:
    return stmt.join(Category, Post.category_id == Category.id)


def _with_category(post: Post, category: Category) -> Post:
    post.category = category
    return post


def _find_category(db: Session, name: str) -> Category | None:
    return db.execute(select(Category).where(Category.name == name)).scalar_one_or_none()


def get_or_create_category(db: Session, name: str) -> Category:
    """Return the category named ``name`` (trimmed), inserting it if needed.

    A concurrent insert of the same name trips ``uq_categories_name``; the
    savepoint is rolled back and the winner's row is read instead.
    """
    name = name.strip()
    category = _find_category(db, name)
    if category:
        return category
    category = Category(name=name)
    try:
        with db.begin_nested():
            db.add(category)
    except IntegrityError:
        logger.info("Category '%s' was created concurrently, reusing it", name)
        return db.execute(select(Category).where(Category.name == name)).scalar_one()
    logger.info("Created category '%s' (id=%s)", name, category.id)
    return category


def create_post(db: Session, title: str, content: str, image_url: str, category: Category) -> Post:
    post = Post(title=title, content=content, image_url=image_url, category_id=category.id)
    db.add(post)
    db.flush()
    return _with_category(post, category)


def list_posts(db: Session) -> list[Post]:
    stmt: Select = (
        _join_category(select(Post, Category))
        .options(defer(Post.content))
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    return [_with_category(post, category) for post, category in db.execute(stmt).all()]


def get_post(db: Session, post_id: int) -> Post | None:
    row = db.execute(_join_category(select(Post, Category)).where(Post.id == post_id)).one_or_none()
    if row is None:
        return None
    post, category = row
    return _with_category(post, category)


def update_post(db: Session, post: Post, changes: dict[str, Any]) -> Post:
    """Overlay ``changes`` onto the stored row and return the re-read post."""
    if changes:
        db.execute(update(Post).where(Post.id == post.id).values(**changes))
    db.flush()
    updated = get_post(db, post.id)
    if updated is None:
        raise LookupError(f"Post {post.id} disappeared during update")
    return updated


def delete_post(db: Session, post: Post) -> None:
    db.delete(post)
    db.flush()
