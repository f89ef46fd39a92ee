"""
Shared test configuration for outlook-cli.

Unit tests (tests/unit) run against an isolated config directory with Graph
and MSAL mocked. Integration tests (tests/integration) run the CLI against
the mailbox of the cached login.
"""


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (needs a real login)"
    )
