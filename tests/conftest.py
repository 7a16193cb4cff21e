import pytest

from helpers import make_image


@pytest.fixture
def image():
    return make_image(23, 17)
