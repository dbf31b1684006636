"""
Routes shared by the markdown document collections (tenders, articles).
Each collection lives under its own key prefix in blob storage.
"""
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from buildmart.core.dependencies import get_current_user
from buildmart.core.errors import server_error, storage_unavailable
from buildmart.models.user import User
from buildmart.schemas.documents import DocumentCreate, DocumentCreated, check_filename
from buildmart.services.documents import list_filenames, load_documents
from buildmart.services.storage_service import BlobStorage, get_storage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def require_storage(storage: Optional[BlobStorage] = Depends(get_storage)) -> BlobStorage:
    if storage is None:
        raise storage_unavailable()
    return storage


def document_router(folder: str, label: str, decoder: Callable) -> APIRouter:
    """
    Build the router for one collection: list decoded documents, list
    filenames, fetch raw content and create a document.
    """
    router = APIRouter(tags=[folder])

    @router.get("")
    def list_documents(storage: Optional[BlobStorage] = Depends(get_storage)):
        """Every decodable document; malformed ones are skipped"""
        if storage is None:
            return []
        try:
            return [d.model_dump(by_alias=True) for d in load_documents(storage, folder, decoder)]
        except Exception as e:
            logger.error(f"Error fetching {folder}: {str(e)}", exc_info=True)
            raise server_error(e, f"fetching {folder}")

    @router.get("/filenames")
    def get_filenames(storage: BlobStorage = Depends(require_storage)):
        try:
            return list_filenames(storage, folder)
        except Exception as e:
            logger.error(f"Error fetching {label} filenames: {str(e)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"message": f"Failed to fetch {label} filenames"},
            )

    @router.get("/content/{filename}", response_class=PlainTextResponse)
    def get_content(filename: str, storage: BlobStorage = Depends(require_storage)):
        try:
            filename = check_filename(filename)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"message": str(e)})
        try:
            stored = storage.get_text(f"{folder}/{filename}")
        except Exception as e:
            logger.error(f"Error fetching {label} content for {filename}: {str(e)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"message": f"Failed to fetch {label} content"},
            )
        if stored is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"message": f"{label.capitalize()} file not found"},
            )
        return PlainTextResponse(stored.text)

    @router.post("", response_model=DocumentCreated, status_code=status.HTTP_201_CREATED)
    def create_document(
        document: DocumentCreate,
        current_user: User = Depends(get_current_user),
        storage: BlobStorage = Depends(require_storage),
    ):
        try:
            logger.info(f"User {current_user.username} is writing {folder}/{document.filename}")
            url = storage.upload_markdown(folder, document.filename, document.content)
            logger.info(f"{label.capitalize()} stored at {url}")
            return DocumentCreated(message=f"{label.capitalize()} created successfully", url=url)
        except Exception as e:
            logger.error(f"Error creating {label}: {str(e)}", exc_info=True)
            raise server_error(e, f"creating the {label}")

    return router
