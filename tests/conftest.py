"""
Pytest configuration for multi-driver testing.

This file sets up automatic parametrization for test classes that inherit from
MultiDriverTestBase and adds driver-specific markers.
"""

import pytest
from tests.framework.multi_driver_base import MultiDriverTestBase


def pytest_generate_tests(metafunc):
    """
    Pytest hook to automatically parametrize the 'api' fixture for MultiDriverTestBase subclasses.

    This ensures every test method in classes that inherit from MultiDriverTestBase
    gets run against all enabled drivers.
    """
    if (hasattr(metafunc, 'cls') and
        metafunc.cls is not None and
        issubclass(metafunc.cls, MultiDriverTestBase) and
        'api' in metafunc.fixturenames):

        drivers = metafunc.cls.get_available_drivers()

        metafunc.parametrize(
            'api',
            drivers,
            indirect=True,
            ids=[f"driver-{d}" for d in drivers]
        )


def pytest_collection_modifyitems(config, items):
    """
    Pytest hook to add driver-specific markers to parametrized tests.

    This allows running tests for specific drivers using markers like:
        pytest -m driver_direct
        pytest -m "not driver_wire"
    """
    for item in items:
        callspec = getattr(item, 'callspec', None)
        if callspec is not None and 'api' in callspec.params:
            item.add_marker(getattr(pytest.mark, f"driver_{callspec.params['api']}"))


def pytest_configure(config):
    config.addinivalue_line("markers", "driver_direct: run against the direct driver")
    config.addinivalue_line("markers", "driver_wire: run against the wire driver")
