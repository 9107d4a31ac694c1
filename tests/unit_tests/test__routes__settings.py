import pytest
from fastapi import status
from fastapi.testclient import TestClient

from s3_store.adapters.settings_store import InMemorySettingsProvider
from s3_store.config.settings import Settings
from s3_store.config.storage import (
    OPTION_ACCESS_KEY_ID,
    OPTION_BUCKET,
    OPTION_SECRET_ACCESS_KEY,
    StorageConfiguration,
)
from s3_store.main import create_app
from tests.consts import (
    TEST_ACCESS_KEY_ID,
    TEST_BUCKET_NAME,
    TEST_REGION,
    TEST_SECRET_ACCESS_KEY,
)

VALID_FORM = {
    "access_key_id": TEST_ACCESS_KEY_ID,
    "secret_access_key": TEST_SECRET_ACCESS_KEY,
    "bucket": TEST_BUCKET_NAME,
    "region": TEST_REGION,
    "expiration_minutes": 15,
}


@pytest.fixture
def provider():
    return InMemorySettingsProvider()


@pytest.fixture
def client(mocked_aws, provider, tmp_path):
    app = create_app(Settings(settings_file=str(tmp_path / "settings.json")), provider)
    with TestClient(app) as client:
        yield client


def test_get_settings_when_unconfigured(client):
    response = client.get("/v1/settings")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["configured"] is False
    assert body["region"] == "us-east-2"
    assert body["expiration_minutes"] == 0


def test_put_settings_saves_valid_options(client, provider):
    response = client.put("/v1/settings", json=VALID_FORM)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["configured"] is True
    assert body["secret_access_key"].endswith(TEST_SECRET_ACCESS_KEY[-4:])
    assert TEST_SECRET_ACCESS_KEY not in response.text

    saved = StorageConfiguration.from_provider(provider)
    assert saved.bucket == TEST_BUCKET_NAME
    assert saved.expiration_minutes == 15

    response = client.get("/v1/settings")
    assert response.json()["bucket"] == TEST_BUCKET_NAME


def test_put_settings_rejects_unknown_bucket(client, provider):
    response = client.put("/v1/settings", json={**VALID_FORM, "bucket": "missing-bucket"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == [
        f"Wrong bucket. Please specify an existing one, like: {TEST_BUCKET_NAME}"
    ]
    assert provider.get(OPTION_BUCKET) is None


def test_put_settings_rejects_wrong_region(client, provider):
    response = client.put("/v1/settings", json={**VALID_FORM, "region": "eu-west-1"})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    body = response.json()
    assert body["detail"] == [f"Wrong region. Please use region of a bucket: {TEST_REGION}"]
    assert body["bucket_region"] == TEST_REGION
    assert provider.all() == {}


@pytest.mark.parametrize(
    "override",
    [{"secret_access_key": ""}, {"bucket": ""}, {"expiration_minutes": -1}],
)
def test_put_settings_validates_form(client, provider, override):
    response = client.put("/v1/settings", json={**VALID_FORM, **override})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert provider.all() == {}


def test_put_settings_blank_secret_is_a_bad_request(client, provider):
    response = client.put("/v1/settings", json={**VALID_FORM, "secret_access_key": "   "})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"].startswith("You must specify your AWS access key and secret key")
    assert provider.all() == {}


def test_health_unconfigured(client):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "degraded"
    assert body["components"]["storage"].startswith("unconfigured")
    assert body["ready"] is False


def test_health_ready_after_configuration(client):
    client.put("/v1/settings", json=VALID_FORM)

    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["components"]["storage"] == "ready"
    assert body["ready"] is True


def test_health_blank_secret_is_unconfigured(client, provider):
    provider.set(OPTION_ACCESS_KEY_ID, TEST_ACCESS_KEY_ID)
    provider.set(OPTION_SECRET_ACCESS_KEY, "   ")
    provider.set(OPTION_BUCKET, TEST_BUCKET_NAME)

    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "degraded"
    assert body["components"]["storage"] == (
        "unconfigured: You must specify your AWS access key and secret key to use the AWS S3 storage adapter."
    )
    assert body["ready"] is False


def test_app_title_comes_from_settings(tmp_path):
    app = create_app(Settings(app_name="Media Store", settings_file=str(tmp_path / "settings.json")))

    assert app.title == "Media Store"
