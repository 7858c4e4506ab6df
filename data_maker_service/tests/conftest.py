# pylint: disable=import-error
from unittest.mock import MagicMock, patch

import pytest
from faker import Faker
from data_maker_service.local_storage import LocalArtifactStore
from s3_service.s3 import S3ServiceConfig
from s3_service.s3_multipart import S3MultipartService

fake = Faker()


@pytest.fixture
def small_limits_config() -> S3ServiceConfig:
    return S3ServiceConfig(
        s3_endpoint_url=fake.url(),
        s3_access_key=fake.password(),
        s3_secret_key=fake.password(),
        max_single_upload_bytes=1000,
        max_part_bytes=400,
        max_part_count=5,
        min_part_bytes=0,
    )


@pytest.fixture
def uploaded_parts() -> list[bytes]:
    return []


@pytest.fixture
def uploaded_objects() -> dict[str, bytes]:
    return {}


@pytest.fixture(name="storage")
@patch("boto3.client")
def fixture_storage(
    boto_client: MagicMock,
    small_limits_config: S3ServiceConfig,
    uploaded_parts: list[bytes],
    uploaded_objects: dict[str, bytes],
) -> S3MultipartService:
    boto_client.return_value = MagicMock()
    service = S3MultipartService(small_limits_config)

    def put_object(**kwargs):
        uploaded_objects[kwargs["Key"]] = kwargs["Body"].read()
        return {"ETag": fake.md5()}

    def upload_part(**kwargs):
        uploaded_parts.append(kwargs["Body"].read())
        return {"ETag": f"etag-{kwargs['PartNumber']}"}

    service.client.put_object.side_effect = put_object
    service.client.create_multipart_upload.return_value = {"UploadId": fake.uuid4()}
    service.client.upload_part.side_effect = upload_part
    return service


@pytest.fixture(name="local_store")
def fixture_local_store(tmp_path) -> LocalArtifactStore:
    store = LocalArtifactStore(str(tmp_path / "work"))
    store.ensure_root()
    return store
