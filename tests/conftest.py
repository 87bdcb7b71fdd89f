import os

import pytest
from PIL import Image


def _write_image(path, size, color=(200, 30, 30), mode="RGB"):
    path = str(path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    Image.new(mode, size, color).save(path)
    return path


@pytest.fixture
def make_image():
    """Factory writing a solid-color image to the given path."""
    return _write_image


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / "input"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "output"
