"""Project-wide pytest configuration; keeps the repository root importable."""


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "property: property-based tests driven by hypothesis"
    )
    config.addinivalue_line(
        "markers", "integration: tests that exchange data over loopback sockets"
    )
