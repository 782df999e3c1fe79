import base64
import functools
from io import BytesIO

import PIL
import anyio.to_thread
from PIL import Image, ImageChops, ImageDraw, ImageOps

from favicon_service.errors import DecodeError, RenderError

FAVICON_SIZE: int = 64
PNG_MIME_TYPE: str = 'image/png'

_mode_rgba = 'RGBA'
_mode_mask = 'L'


def _open_image(data: bytes) -> PIL.Image.Image:
    try:
        with Image.open(BytesIO(data)) as im:
            im.load()
            return im.convert(_mode_rgba)
    except (PIL.UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Couldn't decode image: {e}") from e


def _create_circle_mask(size: int) -> PIL.Image.Image:
    mask = Image.new(_mode_mask, (size, size), 0)
    draw = ImageDraw.Draw(mask)
    # bounding box is inclusive, so the circle has radius size/2 around (size/2, size/2)
    draw.ellipse((0, 0, size - 1, size - 1), fill=255)
    return mask


def render_favicon(data: bytes, size: int = FAVICON_SIZE) -> bytes:
    """
    Resizes the image to size x size and cuts it into a circle with transparent corners.
    :param data: Encoded source image, any format Pillow can read
    :param size: Favicon width and height
    :return: PNG bytes
    :raises DecodeError: if data is not an image
    :raises RenderError: if resizing or encoding fails
    """
    assert data is not None, "data cannot be None"
    assert size > 0, "size must be greater than 0"

    source = _open_image(data)
    try:
        with ImageOps.fit(source, (size, size), method=Image.Resampling.LANCZOS) as im:
            # destination-in: keep image pixels only where the mask is opaque
            alpha = ImageChops.multiply(im.getchannel('A'), _create_circle_mask(size))
            im.putalpha(alpha)

            result = BytesIO()
            im.save(result, 'PNG')
            return result.getvalue()
    except (ValueError, OSError, TypeError) as e:
        raise RenderError(f"Failed to render favicon: {e}") from e
    finally:
        source.close()


async def render_favicon_async(data: bytes, size: int = FAVICON_SIZE) -> bytes:
    func = functools.partial(render_favicon, data=data, size=size)
    return await anyio.to_thread.run_sync(func)


def to_data_uri(png: bytes) -> str:
    return f"data:{PNG_MIME_TYPE};base64,{base64.b64encode(png).decode('ascii')}"
