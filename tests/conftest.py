"""Test configuration and fixtures."""

import pytest

from threadline.domain.service import PathAlgebra, SegmentCodec
from threadline.domain.value import TreeShape


@pytest.fixture
def path_algebra() -> PathAlgebra:
    """Path algebra for the default tree shape."""
    return PathAlgebra(SegmentCodec(TreeShape()))
