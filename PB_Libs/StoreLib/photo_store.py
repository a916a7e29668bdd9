"""
Photo and background storage for Photo Booth.

This module is the persistence layer the booth hands finished images to.
Records are kept in a JSON index next to the PNG files they describe.

Directory layout:
    <base_dir>/photos/photos.json              photo records
    <base_dir>/photos/<id>.png                 photo pixels
    <base_dir>/backgrounds/backgrounds.json    background records

Classes:
    PhotoRecord: Saved photo metadata
    BackgroundRecord: Selectable background metadata
    PhotoStore: Save/update/list/delete photos
    BackgroundStore: List active backgrounds and load their images asynchronously

Functions:
    encode_png: Encode a Frame as PNG bytes
    decode_image: Decode image bytes (any Pillow format) into a Frame
    load_image_file: Read an image file into a Frame
"""

import io
import json
import logging
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from PIL import Image

from PB_Libs.constants import (
    BACKGROUND_INDEX_FILE,
    BACKGROUNDS_DIR_NAME,
    DEFAULT_OUTPUT_FORMAT,
    FIELD_CREATED_BY,
    FIELD_CREATED_DATE,
    FIELD_ID,
    FIELD_IMAGE_PATH,
    FIELD_IS_ACTIVE,
    FIELD_IS_PUBLIC,
    FIELD_NAME,
    PHOTO_INDEX_FILE,
    PHOTOS_DIR_NAME,
)
from PB_Libs.ImagingLib.frame_models import Frame

logger = logging.getLogger(__name__)


def encode_png(frame: Frame) -> bytes:
    buffer = io.BytesIO()
    frame.to_image().save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def decode_image(data: bytes) -> Frame:
    """
    Decode image bytes into an RGBA Frame.

    Raises:
        ValueError: If the bytes are not a readable image
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return Frame.from_image(image)
    except OSError as exc:
        raise ValueError(f"Unreadable image data: {exc}") from exc


def load_image_file(path: Path) -> Frame:
    """
    Read an image file into a Frame.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a readable image
    """
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    return decode_image(path.read_bytes())


def _read_index(index_path: Path) -> List[Dict[str, Any]]:
    if not index_path.exists():
        return []
    try:
        data = json.loads(index_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Corrupt index file {index_path}: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError(f"Index file must contain a JSON list: {index_path}")
    return data


def _write_index(index_path: Path, records: List[Dict[str, Any]]) -> None:
    index_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = index_path.with_suffix(index_path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(records, indent=2), encoding="utf-8")
    tmp_path.replace(index_path)


# ============================================================================
# Photos
# ============================================================================

@dataclass
class PhotoRecord:
    id: str
    image_path: str
    is_public: bool
    created_date: str
    created_by: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotoRecord":
        return cls(
            id=str(data[FIELD_ID]),
            image_path=str(data[FIELD_IMAGE_PATH]),
            is_public=bool(data.get(FIELD_IS_PUBLIC, False)),
            created_date=str(data.get(FIELD_CREATED_DATE, "")),
            created_by=str(data.get(FIELD_CREATED_BY, "")),
        )


class PhotoStore:
    """File-backed store of saved photos."""

    def __init__(self, base_dir: Path) -> None:
        self.photos_dir = Path(base_dir) / PHOTOS_DIR_NAME
        self.photos_dir.mkdir(parents=True, exist_ok=True)
        self.index_path = self.photos_dir / PHOTO_INDEX_FILE

    def _records(self) -> List[PhotoRecord]:
        return [PhotoRecord.from_dict(item) for item in _read_index(self.index_path)]

    def _write(self, records: List[PhotoRecord]) -> None:
        _write_index(self.index_path, [record.to_dict() for record in records])

    def save(self, frame: Frame, user_id: str, is_public: bool = False) -> str:
        """
        Store a final image.

        Args:
            frame: Image to store (encoded as PNG)
            user_id: Opaque identifier of the acting user
            is_public: Whether the photo is shown publicly

        Returns:
            The new photo id
        """
        photo_id = str(uuid.uuid4())
        image_path = self.photos_dir / f"{photo_id}.png"
        image_path.write_bytes(encode_png(frame))

        record = PhotoRecord(
            id=photo_id,
            image_path=image_path.name,
            is_public=is_public,
            created_date=datetime.now(timezone.utc).isoformat(),
            created_by=str(user_id),
        )
        records = self._records()
        records.append(record)
        self._write(records)
        logger.info(f"Saved photo {photo_id} for {user_id}")
        return photo_id

    def get(self, photo_id: str) -> Optional[PhotoRecord]:
        for record in self._records():
            if record.id == photo_id:
                return record
        return None

    def update(self, photo_id: str, frame: Frame) -> None:
        """
        Replace a photo's pixels.

        Raises:
            KeyError: If the photo does not exist
        """
        record = self.get(photo_id)
        if record is None:
            raise KeyError(f"Unknown photo: {photo_id}")
        (self.photos_dir / record.image_path).write_bytes(encode_png(frame))
        logger.info(f"Updated photo {photo_id}")

    def get_by_user(self, user_id: str) -> List[PhotoRecord]:
        """Photos created by a user, newest first."""
        records = [record for record in self._records() if record.created_by == user_id]
        return sorted(records, key=lambda record: record.created_date, reverse=True)

    def delete(self, photo_id: str) -> bool:
        records = self._records()
        remaining = [record for record in records if record.id != photo_id]
        if len(remaining) == len(records):
            return False
        for record in records:
            if record.id == photo_id:
                (self.photos_dir / record.image_path).unlink(missing_ok=True)
        self._write(remaining)
        logger.info(f"Deleted photo {photo_id}")
        return True

    def load(self, photo_id: str) -> Frame:
        """
        Raises:
            KeyError: If the photo does not exist
        """
        record = self.get(photo_id)
        if record is None:
            raise KeyError(f"Unknown photo: {photo_id}")
        return load_image_file(self.photos_dir / record.image_path)


# ============================================================================
# Backgrounds
# ============================================================================

@dataclass
class BackgroundRecord:
    id: str
    name: str
    image_path: str
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackgroundRecord":
        return cls(
            id=str(data[FIELD_ID]),
            name=str(data.get(FIELD_NAME, "")),
            image_path=str(data[FIELD_IMAGE_PATH]),
            is_active=bool(data.get(FIELD_IS_ACTIVE, True)),
        )


class BackgroundStore:
    """
    File-backed list of backgrounds.

    Image paths in records are resolved relative to the backgrounds directory
    unless absolute.
    """

    def __init__(self, base_dir: Path, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self.backgrounds_dir = Path(base_dir) / BACKGROUNDS_DIR_NAME
        self.backgrounds_dir.mkdir(parents=True, exist_ok=True)
        self.index_path = self.backgrounds_dir / BACKGROUND_INDEX_FILE
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="background-load"
        )

    def get_all(self) -> List[BackgroundRecord]:
        return [BackgroundRecord.from_dict(item) for item in _read_index(self.index_path)]

    def get_active(self) -> List[BackgroundRecord]:
        return [record for record in self.get_all() if record.is_active]

    def add(self, record: BackgroundRecord) -> None:
        records = [existing for existing in self.get_all() if existing.id != record.id]
        records.append(record)
        _write_index(self.index_path, [item.to_dict() for item in records])

    def resolve_path(self, record: BackgroundRecord) -> Path:
        path = Path(record.image_path)
        return path if path.is_absolute() else self.backgrounds_dir / path

    def load(self, record: BackgroundRecord) -> "Future[Frame]":
        """
        Load a background image on a worker thread.

        Returns:
            Future resolving to the image; a failed load surfaces as the
            future's exception
        """
        path = self.resolve_path(record)
        future = self._executor.submit(load_image_file, path)
        future.add_done_callback(lambda done: self._log_load(record, done))
        return future

    @staticmethod
    def _log_load(record: BackgroundRecord, future: "Future[Frame]") -> None:
        if future.cancelled():
            return
        if future.exception() is not None:
            logger.warning(f"Background '{record.name}' failed to load: {future.exception()}")
        else:
            logger.debug(f"Background '{record.name}' loaded")

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
