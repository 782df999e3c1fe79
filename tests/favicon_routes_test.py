import base64
import warnings
from io import BytesIO
from unittest.mock import Mock

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from favicon_service.config import AppSettings
from favicon_service.images.dependencies import get_image_resolver
from favicon_service.images.input_resolver import ImageResolver
from favicon_service.main import create_web_app

_token = 'unit-test-token'
_auth_headers = {'Authorization': f'Bearer {_token}'}
_data_uri_prefix = 'data:image/png;base64,'


def _make_jpeg(size: tuple[int, int] = (10, 10), color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
    result = BytesIO()
    Image.new('RGB', size, color).save(result, 'JPEG')
    return result.getvalue()


def _decode_favicon(favicon: str) -> Image.Image:
    assert favicon.startswith(_data_uri_prefix)
    return Image.open(BytesIO(base64.b64decode(favicon[len(_data_uri_prefix):])))


@pytest.fixture
def client() -> TestClient:
    web_app = create_web_app(AppSettings(auth_token=_token, max_body_size=64 * 1024))
    return TestClient(web_app)


def test_favicon_without_token_returns_401(client: TestClient):
    # act
    response = client.post('/favicon', json={'imageBase64': 'abcd'})

    # assert
    assert response.status_code == 401
    assert response.json() == {'error': 'Unauthorized'}


def test_favicon_with_non_bearer_header_returns_401(client: TestClient):
    # act
    response = client.post('/favicon', json={'imageBase64': 'abcd'}, headers={'Authorization': f'Basic {_token}'})

    # assert
    assert response.status_code == 401


def test_favicon_with_wrong_token_returns_403(client: TestClient):
    # act
    response = client.post('/favicon', json={'imageBase64': 'abcd'}, headers={'Authorization': 'Bearer wrong'})

    # assert
    assert response.status_code == 403
    assert response.json() == {'error': 'Forbidden'}


def test_favicon_from_upload(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers,
                           files={'image': ('red.jpg', _make_jpeg(), 'image/jpeg')})

    # assert
    assert response.status_code == 200
    with _decode_favicon(response.json()['favicon']) as image:
        assert image.format == 'PNG'
        assert image.size == (64, 64)
        assert image.getpixel((0, 0))[3] == 0

        r, g, b, a = image.getpixel((32, 32))
        assert a == 255
        assert r > 200 and g < 60 and b < 60


def test_favicon_upload_wins_over_other_fields(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers,
                           data={'imageUrl': 'http://127.0.0.1:1/never-fetched.png'},
                           files={'image': ('red.jpg', _make_jpeg(), 'image/jpeg')})

    # assert
    assert response.status_code == 200


def test_favicon_data_uri_and_raw_base64_are_identical(client: TestClient):
    # arrange
    raw = base64.b64encode(_make_jpeg((40, 30), (0, 90, 200))).decode('ascii')

    # act
    from_raw = client.post('/favicon', headers=_auth_headers, json={'imageBase64': raw})
    from_data_uri = client.post('/favicon', headers=_auth_headers,
                                json={'imageBase64': f'data:image/jpeg;base64,{raw}'})

    # assert
    assert from_raw.status_code == 200
    assert from_data_uri.status_code == 200
    assert from_raw.json()['favicon'] == from_data_uri.json()['favicon']


def test_favicon_is_idempotent(client: TestClient):
    # arrange
    image = _make_jpeg((17, 33), (10, 200, 30))

    # act
    first = client.post('/favicon', headers=_auth_headers, files={'image': ('a.jpg', image, 'image/jpeg')})
    second = client.post('/favicon', headers=_auth_headers, files={'image': ('a.jpg', image, 'image/jpeg')})

    # assert
    assert first.json() == second.json()


def test_favicon_from_url_encoded_base64(client: TestClient):
    # arrange
    raw = base64.b64encode(_make_jpeg()).decode('ascii')

    # act
    response = client.post('/favicon', headers=_auth_headers, data={'imageBase64': raw})

    # assert
    assert response.status_code == 200
    assert response.json()['favicon'].startswith(_data_uri_prefix)


def test_favicon_from_url(client: TestClient):
    # arrange
    image = _make_jpeg()
    transport = httpx.MockTransport(lambda _: httpx.Response(200, content=image))
    client.app.dependency_overrides[get_image_resolver] = lambda: ImageResolver(Mock(), 5.0, transport=transport)

    # act
    response = client.post('/favicon', headers=_auth_headers, json={'imageUrl': 'http://images.local/red.jpg'})

    # assert
    assert response.status_code == 200
    with _decode_favicon(response.json()['favicon']) as favicon:
        assert favicon.size == (64, 64)


def test_favicon_without_image_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers, json={})

    # assert
    assert response.status_code == 400
    error = response.json()['error']
    assert '"image"' in error
    assert 'imageUrl' in error
    assert 'imageBase64' in error


def test_favicon_without_body_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers)

    # assert
    assert response.status_code == 400


def test_favicon_unreachable_url_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers, json={'imageUrl': 'http://127.0.0.1:1/icon.png'})

    # assert
    assert response.status_code == 400
    assert 'http://127.0.0.1:1/icon.png' in response.json()['error']


def test_favicon_invalid_base64_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers, json={'imageBase64': 'data:image/png;base64,%%%'})

    # assert
    assert response.status_code == 400


def test_favicon_not_an_image_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers,
                           files={'image': ('notes.txt', b'just some text', 'text/plain')})

    # assert
    assert response.status_code == 400
    assert response.json()['error']


def test_favicon_malformed_json_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers={**_auth_headers, 'Content-Type': 'application/json'},
                           content=b'{"imageBase64": ')

    # assert
    assert response.status_code == 400


def test_favicon_too_large_body_returns_413(client: TestClient):
    # act
    response = client.post('/favicon', headers=_auth_headers, json={'imageBase64': 'A' * (128 * 1024)})

    # assert
    assert response.status_code == 413
    assert response.json() == {'error': 'Request body is too large'}


@pytest.mark.parametrize('path', ['/hc', '/health'])
def test_health_check(path: str, client: TestClient):
    # act
    response = client.get(path)

    # assert
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


def test_favicon_with_padded_token_returns_403(client: TestClient):
    # act
    response = client.post('/favicon', json={'imageBase64': 'abcd'}, headers={'Authorization': f'Bearer   {_token}  '})

    # assert
    assert response.status_code == 403
    assert response.json() == {'error': 'Forbidden'}


def test_favicon_multipart_without_boundary_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers={**_auth_headers, 'Content-Type': 'multipart/form-data'},
                           content=b'xx')

    # assert
    assert response.status_code == 400
    assert set(response.json().keys()) == {'error'}


def test_favicon_url_encoded_invalid_utf8_returns_400(client: TestClient):
    # act
    response = client.post('/favicon', headers={**_auth_headers, 'Content-Type': 'application/x-www-form-urlencoded'},
                           content=b'imageUrl=http://images.local/\xff.png')

    # assert
    assert response.status_code == 400
    assert response.json() == {'error': 'Url-encoded body is not valid UTF-8'}


def test_favicon_too_large_body_uses_current_status_name(client: TestClient):
    # act
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter('always')
        response = client.post('/favicon', headers=_auth_headers, json={'imageBase64': 'A' * (128 * 1024)})

    # assert
    assert response.status_code == 413
    assert not [w for w in caught if 'HTTP_413_REQUEST_ENTITY_TOO_LARGE' in str(w.message)]
