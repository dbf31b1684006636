import io
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import UploadFile
from google.api_core.exceptions import PreconditionFailed
from google.cloud import storage
from google.oauth2 import service_account
from PIL import Image, UnidentifiedImageError

from buildmart.core.config import GCS_CREDENTIALS_PATH, GCS_BUCKET_NAME, CDN_BASE_URL

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5MB
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg")


class StaleVersionError(Exception):
    """Raised when a conditional write finds the object at a different generation"""


@dataclass(frozen=True)
class StoredText:
    text: str
    generation: int


class BlobStorage:
    """
    Object storage for uploaded media and markdown documents.

    Subclasses provide the four primitives (put_bytes, get_text, list_keys,
    public_url); uploads of images and documents are built on top of them.
    Generations follow GCS semantics: every write produces a new positive
    generation, and if_generation_match=0 means "only if the object does not exist".
    """

    def put_bytes(
        self,
        key: str,
        data: bytes,
        content_type: str,
        if_generation_match: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def get_text(self, key: str) -> Optional[StoredText]:
        raise NotImplementedError

    def list_keys(self, prefix: str) -> List[str]:
        raise NotImplementedError

    def public_url(self, key: str) -> str:
        raise NotImplementedError

    def _generate_filename(self, original_filename: str, prefix: str) -> str:
        """Generate unique filename"""
        ext = os.path.splitext(original_filename or "")[1].lower()
        if not ext:
            ext = '.jpg'
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        return f"{prefix}/{timestamp}_{unique_id}{ext}"

    def _optimize_image(self, file_content: bytes, max_size: Tuple[int, int] = (1920, 1920)) -> bytes:
        """Optimize and compress image"""
        image = Image.open(io.BytesIO(file_content))

        # Convert RGBA to RGB if needed
        if image.mode == 'RGBA':
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        elif image.mode != 'RGB':
            image = image.convert('RGB')

        # Resize if larger than max_size
        image.thumbnail(max_size, Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, format='JPEG', quality=85, optimize=True)
        return output.getvalue()

    async def upload_image(self, file: UploadFile, folder: str) -> str:
        """
        Upload an image and return its public URL

        Args:
            file: FastAPI UploadFile
            folder: Key prefix (uploads, ad/banner)

        Raises:
            ValueError: file is too large, not an image, or has an unsupported extension
        """
        original = file.filename or ""
        ext = os.path.splitext(original)[1].lower()
        if ext and ext not in IMAGE_EXTENSIONS:
            raise ValueError("Please upload a valid image file (jpg, jpeg, png, gif, svg, webp)")

        content = await file.read()
        if len(content) > MAX_UPLOAD_BYTES:
            raise ValueError("File exceeds the 5MB upload limit")

        if ext == ".svg":
            key = self._generate_filename(original, folder)
            self.put_bytes(key, content, "image/svg+xml")
        else:
            try:
                optimized_content = self._optimize_image(content)
            except (UnidentifiedImageError, OSError) as e:
                raise ValueError(f"Could not read image '{original}': {e}")
            key = self._generate_filename(os.path.splitext(original)[0] + ".jpg", folder)
            self.put_bytes(key, optimized_content, "image/jpeg")

        url = self.public_url(key)
        logger.info(f"Image uploaded successfully: {url}")
        return url

    async def upload_images(self, files: List[UploadFile], folder: str, max_images: int = 3) -> List[str]:
        """Upload several images, preserving their order"""
        if len(files) > max_images:
            raise ValueError(f"Maximum {max_images} images allowed. You provided {len(files)} images.")
        return [await self.upload_image(f, folder) for f in files]

    def upload_markdown(self, folder: str, filename: str, content: str) -> str:
        """Store a markdown document under folder/filename and return its public URL"""
        key = f"{folder}/{filename}"
        self.put_bytes(key, content.encode("utf-8"), "text/markdown")
        return self.public_url(key)


class StorageService(BlobStorage):
    def __init__(self):
        credentials_path = GCS_CREDENTIALS_PATH
        self.bucket_name = GCS_BUCKET_NAME
        self.cdn_base_url = CDN_BASE_URL

        if not credentials_path or not self.bucket_name or not self.cdn_base_url:
            raise ValueError("GCS configuration missing in .env file")

        # Make path absolute if it's relative
        if not os.path.isabs(credentials_path):
            credentials_path = os.path.join(os.getcwd(), credentials_path)

        if not os.path.exists(credentials_path):
            raise ValueError(f"GCS credentials file not found at: {credentials_path}")

        credentials = service_account.Credentials.from_service_account_file(
            credentials_path
        )
        self.client = storage.Client(credentials=credentials)
        self.bucket = self.client.bucket(self.bucket_name)

    def put_bytes(self, key, data, content_type, if_generation_match=None):
        blob = self.bucket.blob(key)
        try:
            blob.upload_from_string(
                data,
                content_type=content_type,
                if_generation_match=if_generation_match,
            )
        except PreconditionFailed as e:
            raise StaleVersionError(f"{key} changed since generation {if_generation_match}") from e
        return int(blob.generation)

    def get_text(self, key):
        blob = self.bucket.get_blob(key)
        if blob is None:
            return None
        return StoredText(text=blob.download_as_text(encoding="utf-8"), generation=int(blob.generation))

    def list_keys(self, prefix):
        return [b.name for b in self.client.list_blobs(self.bucket_name, prefix=prefix)]

    def public_url(self, key):
        return f"{self.cdn_base_url}/{key}"


# Singleton instance - initialized when first imported
try:
    storage_service: Optional[BlobStorage] = StorageService()
except Exception as e:
    logger.error(f"Failed to initialize StorageService: {str(e)}")
    logger.error("Make sure GCS_CREDENTIALS_PATH, GCS_BUCKET_NAME, and CDN_BASE_URL are set in .env file")
    storage_service = None


def get_storage() -> Optional[BlobStorage]:
    """Dependency returning the configured blob storage, or None when unconfigured"""
    return storage_service
