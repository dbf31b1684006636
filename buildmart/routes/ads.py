import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, Response, UploadFile, status
from pydantic import ValidationError

from buildmart.core.dependencies import get_current_user
from buildmart.core.errors import bad_request, conflict, server_error, storage_unavailable, upload_error, validation_error
from buildmart.models.user import User
from buildmart.schemas.ads import AdInput, AdListResponse, AdMutationResponse, AdStatusUpdate
from buildmart.services.ads_store import (
    BANNER_FOLDER,
    AdDocumentError,
    AdNotFoundError,
    AdStore,
    format_etag,
    parse_if_match,
)
from buildmart.services.storage_service import BlobStorage, StaleVersionError, get_storage

router = APIRouter(tags=["ads"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_ad_store(storage: Optional[BlobStorage] = Depends(get_storage)) -> AdStore:
    if storage is None:
        raise storage_unavailable()
    return AdStore(storage)


def _expected_version(if_match: Optional[str]) -> Optional[int]:
    try:
        return parse_if_match(if_match)
    except ValueError as e:
        raise bad_request(str(e), field="If-Match")


def _apply(response: Response, operation, *args, **kwargs):
    """Run one store mutation and translate its failures into HTTP errors"""
    try:
        ad, version = operation(*args, **kwargs)
    except StaleVersionError as e:
        logger.warning(f"Rejected stale ad update: {str(e)}")
        raise conflict("The ads were changed by someone else. Reload and try again.")
    except AdNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "NotFoundError", "message": str(e), "type": "not_found"},
        )
    except AdDocumentError as e:
        logger.error(f"Ad document is unreadable: {str(e)}")
        raise server_error(e, "reading the ads document")
    response.headers["ETag"] = format_etag(version)
    return ad, version


@router.get("", response_model=AdListResponse)
def list_ads(response: Response, store: AdStore = Depends(get_ad_store)):
    """All ads with the document version to send back as If-Match"""
    try:
        snapshot = store.load()
    except Exception as e:
        logger.error(f"Error fetching ads: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to fetch ads"},
        )
    etag = format_etag(snapshot.version)
    if etag:
        response.headers["ETag"] = etag
    return AdListResponse(ads=snapshot.ads, version=snapshot.version)


@router.get("/markdown")
def list_ads_markdown(store: AdStore = Depends(get_ad_store)):
    try:
        return store.load().ads
    except Exception as e:
        logger.error(f"Error fetching ads from markdown: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Failed to fetch ads"},
        )


@router.post("", response_model=AdMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_ad(
    response: Response,
    title: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    banner: Optional[UploadFile] = File(None),
    if_match: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    store: AdStore = Depends(get_ad_store),
):
    try:
        fields = AdInput(title=title, link=link)
    except ValidationError as e:
        raise validation_error(e)
    if banner is None or not banner.filename:
        raise bad_request("Title, link, and banner are required.", field="banner")
    expected = _expected_version(if_match)

    try:
        banner_url = await store.storage.upload_image(banner, BANNER_FOLDER)
    except ValueError as ve:
        raise upload_error(ve, "banner")

    logger.info(f"User {current_user.username} is creating ad '{fields.title}'")
    ad, version = _apply(response, store.create, fields.title, fields.link, banner_url, expected_version=expected)
    logger.info(f"Ad created successfully: {ad['id']} (version {version})")
    return AdMutationResponse(message="Ad created successfully.", ad=ad, version=version)


@router.put("/{ad_id}/status", response_model=AdMutationResponse)
def update_ad_status(
    ad_id: str,
    payload: AdStatusUpdate,
    response: Response,
    if_match: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    store: AdStore = Depends(get_ad_store),
):
    expected = _expected_version(if_match)
    logger.info(f"User {current_user.username} is setting ad {ad_id} to '{payload.status}'")
    ad, version = _apply(response, store.set_status, ad_id, payload.status, expected_version=expected)
    return AdMutationResponse(message="Ad status updated successfully.", ad=ad, version=version)


@router.put("/{ad_id}", response_model=AdMutationResponse)
async def update_ad(
    ad_id: str,
    response: Response,
    title: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    banner: Optional[UploadFile] = File(None),
    if_match: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    store: AdStore = Depends(get_ad_store),
):
    try:
        fields = AdInput(title=title, link=link)
    except ValidationError as e:
        raise validation_error(e)
    expected = _expected_version(if_match)

    banner_url = None
    if banner is not None and banner.filename:
        try:
            banner_url = await store.storage.upload_image(banner, BANNER_FOLDER)
        except ValueError as ve:
            raise upload_error(ve, "banner")

    logger.info(f"User {current_user.username} is updating ad {ad_id}")
    ad, version = _apply(
        response, store.update, ad_id, fields.title, fields.link, banner=banner_url, expected_version=expected
    )
    return AdMutationResponse(message="Ad updated successfully.", ad=ad, version=version)


@router.delete("/{ad_id}", response_model=AdMutationResponse)
def delete_ad(
    ad_id: str,
    response: Response,
    if_match: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    store: AdStore = Depends(get_ad_store),
):
    expected = _expected_version(if_match)
    logger.info(f"User {current_user.username} is deleting ad {ad_id}")
    ad, version = _apply(response, store.delete, ad_id, expected_version=expected)
    return AdMutationResponse(message="Ad deleted successfully.", ad=ad, version=version)
