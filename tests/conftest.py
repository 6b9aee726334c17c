import zipfile

import aws_cdk as cdk
import pytest

from infrastructure.assembly import assemble
from tests.consts import TEST_DOMAIN, TEST_HOSTED_ZONE


@pytest.fixture
def bundle_path(tmp_path):
    """A minimal pre-built application bundle."""
    path = tmp_path / "app.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("Procfile", "web: java -jar app.jar\n")
    return path


@pytest.fixture
def environ():
    return {"DOMAIN": TEST_DOMAIN, "HOSTED_ZONE": TEST_HOSTED_ZONE}


@pytest.fixture
def stack(environ, bundle_path):
    app = cdk.App()
    return assemble(app, environ, bundle_path=bundle_path)
