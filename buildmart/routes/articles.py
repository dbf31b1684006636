import logging
import os
import uuid
from datetime import datetime

from fastapi import Depends, File, HTTPException, UploadFile, status

from buildmart.core.dependencies import get_current_user
from buildmart.core.errors import server_error
from buildmart.models.user import User
from buildmart.routes.documents import document_router, require_storage
from buildmart.schemas.documents import DocumentCreated
from buildmart.services.documents import ARTICLES_FOLDER, decode_article
from buildmart.services.storage_service import MAX_UPLOAD_BYTES, BlobStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

router = document_router(ARTICLES_FOLDER, "article", decode_article)


@router.post("/upload", response_model=DocumentCreated)
async def upload_article(
    article: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    storage: BlobStorage = Depends(require_storage),
):
    """Store an uploaded .md file under a generated name"""
    ext = os.path.splitext(article.filename or "")[1].lower()
    if ext != ".md":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "ValidationError", "message": "Only .md files are allowed", "field": "article"},
        )
    content = await article.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "ValidationError", "message": "File exceeds the 5MB upload limit", "field": "article"},
        )
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "ValidationError", "message": "Article must be UTF-8 text", "field": "article"},
        )

    filename = f"article-{datetime.now().strftime('%Y%m%d_%H%M%S')}_{str(uuid.uuid4())[:8]}.md"
    try:
        logger.info(f"User {current_user.username} is uploading article {article.filename} as {filename}")
        url = storage.upload_markdown(ARTICLES_FOLDER, filename, text)
        return DocumentCreated(message="Article uploaded successfully.", url=url)
    except Exception as e:
        logger.error(f"Error uploading article: {str(e)}", exc_info=True)
        raise server_error(e, "uploading the article")
