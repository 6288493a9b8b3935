from io import BytesIO

from PIL import Image, ImageOps

FULL_SIZE = (1920, 1920)
THUMBNAIL_SIZE = (400, 400)


def compress_image(fileobj, max_size, quality):
    """
    Downscale to fit max_size (keeping the aspect ratio) and re-encode
    as JPEG. Smaller images are only re-encoded.
    """
    fileobj.seek(0)
    with Image.open(fileobj) as img:
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGB")
        img.thumbnail(max_size)
        out = BytesIO()
        img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue()


def photo_variants(fileobj):
    """(full, thumbnail) JPEG bytes for an uploaded photo."""
    full = compress_image(fileobj, FULL_SIZE, quality=90)
    thumbnail = compress_image(fileobj, THUMBNAIL_SIZE, quality=70)
    return full, thumbnail
