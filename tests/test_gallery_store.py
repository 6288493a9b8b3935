from io import BytesIO

import pytest
from botocore.exceptions import ClientError
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from aws_config import ALBUMS_TABLE, PHOTOS_TABLE, S3_PHOTO_BUCKET
from stand import images
from stand.exceptions import NotFound
from stand.store import gallery


def _upload(name="stand.png", size=(3000, 1500)):
    buf = BytesIO()
    Image.new("RGB", size, color=(200, 80, 20)).save(buf, format="PNG")
    return SimpleUploadedFile(name, buf.getvalue(), content_type="image/png")


def _jpeg_size(data):
    with Image.open(BytesIO(data)) as img:
        assert img.format == "JPEG"
        return img.size


def test_photo_variants_are_downscaled_jpegs():
    full, thumbnail = images.photo_variants(_upload())
    assert _jpeg_size(full) == (1920, 960)
    assert _jpeg_size(thumbnail) == (400, 200)


def test_small_images_keep_their_size():
    full, _ = images.photo_variants(_upload(size=(300, 200)))
    assert _jpeg_size(full) == (300, 200)


def test_add_photo_uploads_both_variants_and_counts(fake_ddb, fake_s3):
    album_id = gallery.create_album("Halloween", "u1")
    photo_id = gallery.add_photo(album_id, _upload(), "u1")

    photo = gallery.get_photo(photo_id)
    assert photo["url"] == f"albums/{album_id}/{photo['file_name']}"
    assert photo["thumbnail_url"] == f"albums/{album_id}/thumbnails/{photo['file_name']}"
    assert photo["file_name"].endswith("_stand.png")
    assert (S3_PHOTO_BUCKET, photo["url"]) in fake_s3.objects
    assert (S3_PHOTO_BUCKET, photo["thumbnail_url"]) in fake_s3.objects
    assert gallery.get_album(album_id)["photo_count"] == 1


def test_delete_photo_updates_count(fake_ddb, fake_s3):
    album_id = gallery.create_album("Market", "u1")
    first = gallery.add_photo(album_id, _upload("a.png"), "u1")
    gallery.add_photo(album_id, _upload("b.png"), "u1")

    gallery.delete_photo(first)

    assert gallery.get_album(album_id)["photo_count"] == 1
    assert [p["photo_id"] for p in gallery.list_photos(album_id)] != [first]
    assert len(gallery.list_photos(album_id)) == 1
    assert len(fake_s3.objects) == 2


def test_delete_album_leaves_no_orphans(fake_ddb, fake_s3):
    doomed = gallery.create_album("Doomed", "u1")
    kept = gallery.create_album("Kept", "u1")
    for name in ("a.png", "b.png"):
        gallery.add_photo(doomed, _upload(name), "u1")
    kept_photo = gallery.add_photo(kept, _upload("c.png"), "u1")

    gallery.delete_album(doomed)

    with pytest.raises(NotFound):
        gallery.get_album(doomed)
    assert gallery.list_photos(doomed) == []
    assert [p["photo_id"] for p in gallery.list_all_photos()] == [kept_photo]
    assert all(key.startswith(f"albums/{kept}/") for _, key in fake_s3.objects)
    assert fake_ddb.count(ALBUMS_TABLE) == 1
    assert fake_ddb.count(PHOTOS_TABLE) == 1


def test_rename_album_only_touches_that_album(fake_ddb):
    first = gallery.create_album("First", "u1")
    second = gallery.create_album("Second", "u1")

    gallery.rename_album(first, "Renamed")

    assert gallery.get_album(first)["name"] == "Renamed"
    assert gallery.get_album(second)["name"] == "Second"
    assert gallery.get_album(first)["photo_count"] == 0


def test_upload_to_missing_album(fake_ddb, fake_s3):
    with pytest.raises(NotFound):
        gallery.add_photo("missing", _upload(), "u1")
    assert fake_s3.objects == {}


def test_counter_update_on_vanished_album_fails_atomically(fake_ddb):
    fake_ddb.put(PHOTOS_TABLE, {"photo_id": "p1", "album_id": "gone", "file_name": "x.jpg"})
    with pytest.raises(ClientError):
        fake_ddb.transact([
            ("delete", PHOTOS_TABLE, {"photo_id": "p1"}),
            ("add", ALBUMS_TABLE, {"album_id": "gone"}, {"photo_count": -1}),
        ])
    assert fake_ddb.count(PHOTOS_TABLE) == 1


def test_photo_url_is_presigned(fake_s3):
    assert gallery.photo_url("albums/a/x.jpg").startswith(f"https://{S3_PHOTO_BUCKET}.s3.test/albums/a/x.jpg")


def test_renaming_deleted_album_does_not_recreate_it(fake_ddb, fake_s3):
    album_id = gallery.create_album("Gone soon", "u1")
    gallery.delete_album(album_id)
    with pytest.raises(NotFound):
        gallery.rename_album(album_id, "Ghost")
    assert fake_ddb.count(ALBUMS_TABLE) == 0
