import logging

from fastapi import FastAPI

from blog_api.api.posts import router as posts_router
from blog_api.api.public import router as public_router
from blog_api.config import get_settings
from blog_api.database import create_tables
from blog_api.errors import register_error_handlers

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Blog API")
register_error_handlers(app)

app.include_router(public_router)
app.include_router(posts_router)


@app.on_event("startup")
def startup_event():
    logger.info("Starting Blog API (%s)", settings.app_env)
    if settings.create_tables_on_startup:
        create_tables()
