"""
Unit tests for the photo and background stores.

Tests PNG encoding, record persistence and asynchronous background loading.
"""

import io
import json
import tempfile
from pathlib import Path

import pytest
from PIL import Image

from PB_Libs.ImagingLib.frame_models import Frame
from PB_Libs.StoreLib.photo_store import (
    BackgroundRecord,
    BackgroundStore,
    PhotoRecord,
    PhotoStore,
    decode_image,
    encode_png,
)


class TestEncoding:
    """Tests for encode_png/decode_image."""

    def test_png_round_trip(self, gradient_frame):
        data = encode_png(gradient_frame)
        assert data.startswith(b"\x89PNG")
        assert decode_image(data).same_pixels(gradient_frame)

    def test_decode_jpeg_to_rgba(self):
        buffer = io.BytesIO()
        Image.new("RGB", (6, 4), (10, 200, 30)).save(buffer, format="JPEG")
        frame = decode_image(buffer.getvalue())
        assert frame.size == (6, 4)
        assert int(frame.pixels[0, 0, 3]) == 255

    def test_decode_garbage(self):
        with pytest.raises(ValueError):
            decode_image(b"definitely not an image")


class TestPhotoStore:
    """Tests for PhotoStore."""

    def test_save_creates_png_and_record(self, make_frame):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = PhotoStore(Path(tmpdir))
            photo_id = store.save(make_frame(), "user-1", is_public=True)

            record = store.get(photo_id)
            assert record.created_by == "user-1"
            assert record.is_public
            assert (store.photos_dir / record.image_path).exists()

            index = json.loads(store.index_path.read_text())
            assert index[0]["id"] == photo_id

    def test_load_round_trip(self, temp_data_dir, gradient_frame):
        store = PhotoStore(temp_data_dir)
        photo_id = store.save(gradient_frame, "user-1")
        assert store.load(photo_id).same_pixels(gradient_frame)

    def test_records_survive_new_store_instance(self, temp_data_dir, make_frame):
        photo_id = PhotoStore(temp_data_dir).save(make_frame(), "user-1")
        assert PhotoStore(temp_data_dir).get(photo_id) is not None

    def test_get_by_user_newest_first(self, temp_data_dir, make_frame):
        store = PhotoStore(temp_data_dir)
        older = store.save(make_frame(), "user-1")
        newer = store.save(make_frame(), "user-1")
        store.save(make_frame(), "user-2")

        records = json.loads(store.index_path.read_text())
        for record in records:
            if record["id"] == older:
                record["created_date"] = "2024-01-01T00:00:00+00:00"
            elif record["id"] == newer:
                record["created_date"] = "2024-06-01T00:00:00+00:00"
        store.index_path.write_text(json.dumps(records))

        assert [record.id for record in store.get_by_user("user-1")] == [newer, older]
        assert store.get_by_user("nobody") == []

    def test_update_replaces_pixels(self, temp_data_dir, make_frame):
        store = PhotoStore(temp_data_dir)
        photo_id = store.save(make_frame(4, 4, (1, 1, 1, 255)), "user-1")
        store.update(photo_id, make_frame(4, 4, (9, 9, 9, 255)))
        assert tuple(store.load(photo_id).pixels[0, 0]) == (9, 9, 9, 255)

    def test_update_unknown(self, temp_data_dir, make_frame):
        with pytest.raises(KeyError):
            PhotoStore(temp_data_dir).update("missing", make_frame())

    def test_load_unknown(self, temp_data_dir):
        with pytest.raises(KeyError):
            PhotoStore(temp_data_dir).load("missing")

    def test_delete(self, temp_data_dir, make_frame):
        store = PhotoStore(temp_data_dir)
        photo_id = store.save(make_frame(), "user-1")
        image_path = store.photos_dir / store.get(photo_id).image_path

        assert store.delete(photo_id)
        assert store.get(photo_id) is None
        assert not image_path.exists()
        assert not store.delete(photo_id)

    def test_corrupt_index(self, temp_data_dir):
        store = PhotoStore(temp_data_dir)
        store.index_path.write_text("{not json")
        with pytest.raises(ValueError):
            store.get_by_user("user-1")

    def test_record_from_dict_defaults(self):
        record = PhotoRecord.from_dict({"id": "a", "image_path": "a.png"})
        assert record.is_public is False
        assert record.created_by == ""


class TestBackgroundStore:
    """Tests for BackgroundStore."""

    def _write_image(self, store, name, color=(0, 0, 255, 255)):
        path = store.backgrounds_dir / name
        Frame.solid(12, 8, color).to_image().save(path, format="PNG")
        return path

    def test_get_active(self, temp_data_dir, immediate_executor):
        store = BackgroundStore(temp_data_dir, executor=immediate_executor)
        store.add(BackgroundRecord("1", "Beach", "beach.png"))
        store.add(BackgroundRecord("2", "Office", "office.png", is_active=False))

        assert [record.name for record in store.get_active()] == ["Beach"]
        assert len(store.get_all()) == 2

    def test_add_replaces_same_id(self, temp_data_dir, immediate_executor):
        store = BackgroundStore(temp_data_dir, executor=immediate_executor)
        store.add(BackgroundRecord("1", "Beach", "beach.png"))
        store.add(BackgroundRecord("1", "Sunset Beach", "beach.png"))

        assert [record.name for record in store.get_all()] == ["Sunset Beach"]

    def test_load_relative_path(self, temp_data_dir, immediate_executor):
        store = BackgroundStore(temp_data_dir, executor=immediate_executor)
        self._write_image(store, "beach.png")
        record = BackgroundRecord("1", "Beach", "beach.png")

        frame = store.load(record).result()

        assert frame.size == (12, 8)
        assert tuple(frame.pixels[0, 0]) == (0, 0, 255, 255)

    def test_load_absolute_path(self, temp_data_dir, immediate_executor, tmp_path_factory):
        store = BackgroundStore(temp_data_dir, executor=immediate_executor)
        other = tmp_path_factory.mktemp("elsewhere") / "space.png"
        Frame.solid(3, 3, (5, 5, 5, 255)).to_image().save(other, format="PNG")

        frame = store.load(BackgroundRecord("2", "Space", str(other))).result()

        assert frame.size == (3, 3)

    def test_load_missing_file_fails_future(self, temp_data_dir, immediate_executor):
        store = BackgroundStore(temp_data_dir, executor=immediate_executor)
        future = store.load(BackgroundRecord("1", "Gone", "gone.png"))

        assert isinstance(future.exception(), FileNotFoundError)

    def test_load_on_worker_thread(self, temp_data_dir):
        store = BackgroundStore(temp_data_dir)
        self._write_image(store, "beach.png")
        try:
            frame = store.load(BackgroundRecord("1", "Beach", "beach.png")).result(timeout=5)
        finally:
            store.close()

        assert frame.size == (12, 8)
