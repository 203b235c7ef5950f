import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from src.chef.auth import ChefRequestAuth
from src.chef.base_client import ChefServerClient
from src.config import ChefServerSettings
from tests.chef.chef_server import SERVER_URL, TIMESTAMP


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_file(tmp_path, private_key):
    path = tmp_path / "reporter.pem"
    path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    return path


@pytest.fixture
def chef_auth(private_key):
    return ChefRequestAuth("reporter", private_key, timestamp=lambda: TIMESTAMP)


@pytest.fixture
def chef_client(chef_auth):
    settings = ChefServerSettings(
        server_url=SERVER_URL, client_name="reporter", search_rows=2
    )
    return ChefServerClient(settings, auth=chef_auth)
