"""
Banner ads, kept as one YAML list in the blob ad/ads.md.

Every mutation is a read-modify-write of the whole document. The write is
conditional on the generation that was read, so two writers racing on the
same version cannot both succeed: the loser gets StaleVersionError and
nothing of theirs is stored.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import yaml

from buildmart.services.storage_service import BlobStorage, StaleVersionError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ADS_KEY = "ad/ads.md"
BANNER_FOLDER = "ad/banner"
AD_STATUSES = ("on", "off")


class AdNotFoundError(LookupError):
    def __init__(self, ad_id: str):
        super().__init__(f"Ad with ID {ad_id} not found")
        self.ad_id = ad_id


class AdDocumentError(ValueError):
    """ad/ads.md exists but is not a YAML list"""


@dataclass(frozen=True)
class AdSnapshot:
    ads: List[Dict]
    version: Optional[int]


def parse_if_match(header: Optional[str]) -> Optional[int]:
    """
    Turn an If-Match / ETag header value into a document version.

    Raises:
        ValueError: the header is present but is not a version this API issued
    """
    if header is None or not header.strip():
        return None
    value = header.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    if not value.isdigit():
        raise ValueError(f"Invalid If-Match value: {header}")
    return int(value)


def format_etag(version: Optional[int]) -> Optional[str]:
    return f'"{version}"' if version is not None else None


class AdStore:
    def __init__(self, storage: BlobStorage):
        self.storage = storage

    def load(self) -> AdSnapshot:
        stored = self.storage.get_text(ADS_KEY)
        if stored is None:
            logger.info(f"{ADS_KEY} not found, starting from an empty list")
            return AdSnapshot(ads=[], version=None)
        try:
            ads = yaml.safe_load(stored.text)
        except yaml.YAMLError as e:
            raise AdDocumentError(f"{ADS_KEY} is not valid YAML ({e.__class__.__name__})")
        if ads is None:
            ads = []
        if not isinstance(ads, list):
            raise AdDocumentError(f"{ADS_KEY} must contain a list of ads")
        return AdSnapshot(ads=ads, version=stored.generation)

    def _save(self, ads: List[Dict], read_version: Optional[int]) -> int:
        content = yaml.safe_dump(ads, allow_unicode=True, sort_keys=False)
        # generation 0 means the document must not exist yet
        precondition = read_version if read_version is not None else 0
        return self.storage.put_bytes(
            ADS_KEY,
            content.encode("utf-8"),
            "text/markdown",
            if_generation_match=precondition,
        )

    def _mutate(self, expected_version: Optional[int], change: Callable[[List[Dict]], Dict]):
        snapshot = self.load()
        if expected_version is not None and expected_version != snapshot.version:
            raise StaleVersionError(
                f"{ADS_KEY} is at version {snapshot.version}, request expected {expected_version}"
            )
        ads = list(snapshot.ads)
        result = change(ads)
        version = self._save(ads, snapshot.version)
        return result, version

    @staticmethod
    def _index_of(ads: List[Dict], ad_id: str) -> int:
        for idx, ad in enumerate(ads):
            if isinstance(ad, dict) and ad.get("id") == ad_id:
                return idx
        raise AdNotFoundError(ad_id)

    def create(self, title: str, link: str, banner: str, expected_version: Optional[int] = None):
        """Append a new ad with status "on"; returns (ad, new version)"""
        def change(ads):
            ad = {"id": str(uuid.uuid4()), "title": title, "link": link, "banner": banner, "status": "on"}
            ads.append(ad)
            return ad
        return self._mutate(expected_version, change)

    def update(
        self,
        ad_id: str,
        title: str,
        link: str,
        banner: Optional[str] = None,
        expected_version: Optional[int] = None,
    ):
        """Replace title and link, and the banner when a new one was uploaded"""
        def change(ads):
            idx = self._index_of(ads, ad_id)
            ad = dict(ads[idx])
            ad["title"] = title
            ad["link"] = link
            if banner:
                ad["banner"] = banner
            ads[idx] = ad
            return ad
        return self._mutate(expected_version, change)

    def set_status(self, ad_id: str, status: str, expected_version: Optional[int] = None):
        if status not in AD_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(AD_STATUSES)}")

        def change(ads):
            idx = self._index_of(ads, ad_id)
            ad = dict(ads[idx])
            ad["status"] = status
            ads[idx] = ad
            return ad
        return self._mutate(expected_version, change)

    def delete(self, ad_id: str, expected_version: Optional[int] = None):
        def change(ads):
            idx = self._index_of(ads, ad_id)
            return ads.pop(idx)
        return self._mutate(expected_version, change)
