import base64
import os
import random
from io import BytesIO

from locust import HttpUser, task, between
from PIL import Image


def _make_image(color: tuple[int, int, int]) -> bytes:
    result = BytesIO()
    Image.new('RGB', (256, 256), color).save(result, 'JPEG')
    return result.getvalue()


_images = [_make_image((255, 0, 0)), _make_image((0, 128, 255)), _make_image((20, 200, 20))]
_headers = {'Authorization': f"Bearer {os.environ.get('AUTH_TOKEN', '')}"}


class AsyncLocustTask(HttpUser):
    wait_time = between(0.01, 0.05)

    @task
    def post_upload(self):
        idx = random.randint(0, len(_images) - 1)
        self.client.post('/favicon', headers=_headers, files={'image': ('img.jpg', _images[idx], 'image/jpeg')},
                         name='Favicon from upload')

    @task
    def post_base64(self):
        payload = f"data:image/jpeg;base64,{base64.b64encode(_images[0]).decode('ascii')}"
        self.client.post('/favicon', headers=_headers, json={'imageBase64': payload}, name='Favicon from base64')
