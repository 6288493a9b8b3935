import logging
import time
import uuid

from aws_config import ALBUMS_TABLE, PHOTOS_TABLE, PRESIGNED_URL_TTL, S3_PHOTO_BUCKET
from aws_lib.dynamodb_client import DynamoDBClient, ItemNotFound
from aws_lib.s3_client import S3Client

from ..domain import utc_now
from ..exceptions import NotFound
from ..images import photo_variants

logger = logging.getLogger(__name__)

ddb = DynamoDBClient()
s3 = S3Client()


def _newest_first(items, field):
    return sorted(items, key=lambda i: i.get(field, ""), reverse=True)


def photo_keys(album_id, file_name):
    """S3 keys of the full photo and its thumbnail."""
    return (
        f"albums/{album_id}/{file_name}",
        f"albums/{album_id}/thumbnails/{file_name}",
    )


# albums
def create_album(name, user_id):
    album = {
        "album_id": str(uuid.uuid4()),
        "name": name,
        "created_at": utc_now(),
        "created_by": user_id,
        "photo_count": 0,
    }
    ddb.put(ALBUMS_TABLE, album)
    logger.info("Album %s created", name)
    return album["album_id"]


def list_albums():
    return _newest_first(ddb.scan(ALBUMS_TABLE), "created_at")


def get_album(album_id):
    album = ddb.get(ALBUMS_TABLE, {"album_id": album_id})
    if not album:
        raise NotFound("Album", album_id)
    return album


def rename_album(album_id, name):
    try:
        ddb.update(ALBUMS_TABLE, {"album_id": album_id}, {"name": name})
    except ItemNotFound:
        raise NotFound("Album", album_id) from None


def delete_album(album_id):
    """Remove every photo (objects and documents) and then the album."""
    photos = ddb.scan(PHOTOS_TABLE, album_id=album_id)
    for photo in photos:
        for key in photo_keys(album_id, photo["file_name"]):
            s3.delete(S3_PHOTO_BUCKET, key)

    actions = [("delete", PHOTOS_TABLE, {"photo_id": p["photo_id"]}) for p in photos]
    actions.append(("delete", ALBUMS_TABLE, {"album_id": album_id}))
    ddb.transact(actions)
    logger.info("Deleted album %s with %d photos", album_id, len(photos))


# photos
def add_photo(album_id, upload, user_id):
    """
    Compress and store an uploaded image; upload is any file-like object
    with a .name (a Django UploadedFile in practice).
    """
    get_album(album_id)
    file_name = f"{int(time.time() * 1000)}_{upload.name}"
    full, thumbnail = photo_variants(upload)

    full_key, thumb_key = photo_keys(album_id, file_name)
    s3.upload_bytes(S3_PHOTO_BUCKET, full_key, full)
    s3.upload_bytes(S3_PHOTO_BUCKET, thumb_key, thumbnail)

    photo = {
        "photo_id": str(uuid.uuid4()),
        "album_id": album_id,
        "url": full_key,
        "thumbnail_url": thumb_key,
        "file_name": file_name,
        "uploaded_at": utc_now(),
        "uploaded_by": user_id,
    }
    ddb.transact([
        ("put", PHOTOS_TABLE, photo),
        ("add", ALBUMS_TABLE, {"album_id": album_id}, {"photo_count": 1}),
    ])
    logger.info("Photo %s uploaded to album %s", file_name, album_id)
    return photo["photo_id"]


def list_photos(album_id):
    return _newest_first(ddb.scan(PHOTOS_TABLE, album_id=album_id), "uploaded_at")


def list_all_photos():
    return _newest_first(ddb.scan(PHOTOS_TABLE), "uploaded_at")


def get_photo(photo_id):
    photo = ddb.get(PHOTOS_TABLE, {"photo_id": photo_id})
    if not photo:
        raise NotFound("Photo", photo_id)
    return photo


def delete_photo(photo_id):
    photo = get_photo(photo_id)
    for key in photo_keys(photo["album_id"], photo["file_name"]):
        s3.delete(S3_PHOTO_BUCKET, key)

    ddb.transact([
        ("delete", PHOTOS_TABLE, {"photo_id": photo_id}),
        ("add", ALBUMS_TABLE, {"album_id": photo["album_id"]}, {"photo_count": -1}),
    ])
    logger.info("Photo %s deleted", photo_id)


def photo_url(key):
    return s3.presigned_url(S3_PHOTO_BUCKET, key, expires_in=PRESIGNED_URL_TTL)
