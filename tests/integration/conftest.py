"""
Fixtures for outlook-cli integration tests.

These tests run the CLI as a subprocess against the mailbox of the cached
login and are skipped when no login is available. Test data is selected
with the search query in tests/integration/config.yaml.
"""

import json
import os
import subprocess
from typing import Any, Dict, List

import pytest
import yaml

from outlook_cli.sdk.auth import get_login_status

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def load_test_config() -> Dict[str, Any]:
    """Load test configuration from tests/integration/config.yaml"""
    config_path = os.path.join(os.path.dirname(__file__), "config.yaml")
    with open(config_path, 'r') as f:
        return yaml.safe_load(f)


TEST_CONFIG = load_test_config()


@pytest.fixture(scope="session", autouse=True)
def require_real_login():
    """Skip the integration suite unless 'outlook login' has been run."""
    status = get_login_status()
    if not status["logged_in"]:
        pytest.skip("Not logged in. Run 'outlook config' and 'outlook login' to run integration tests.")


@pytest.fixture(scope="session")
def cli_runner():
    """
    Factory fixture that executes CLI commands via subprocess.

    Returns a function taking the command arguments and returning a dict with
    returncode, stdout, stderr, and json (parsed stdout, or None).
    """
    def run_command(command_args: List[str]) -> Dict[str, Any]:
        try:
            result = subprocess.run(
                ["python3", "-m", "outlook_cli.cli"] + command_args,
                capture_output=True,
                text=True,
                timeout=60,
                cwd=PROJECT_ROOT,
            )
        except subprocess.TimeoutExpired:
            return {"returncode": 124, "stdout": "", "stderr": "Command timed out", "json": None}

        json_data = None
        if result.stdout.strip():
            try:
                json_data = json.loads(result.stdout)
            except json.JSONDecodeError:
                # Human-readable output
                json_data = None

        return {
            "returncode": result.returncode,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "json": json_data,
        }

    return run_command


@pytest.fixture(scope="session")
def test_message_id(cli_runner) -> str:
    """ID of the first message matching the configured search query."""
    query = TEST_CONFIG.get('search', {}).get('query', '')
    result = cli_runner(["--json", "list", "-q", query, "-n", "10"])

    if result["returncode"] != 0:
        pytest.fail(f"Failed to search for test messages.\nError: {result['stderr']}")

    min_results = TEST_CONFIG.get('test_data', {}).get('min_results', 1)
    if not isinstance(result["json"], list) or len(result["json"]) < min_results:
        pytest.fail(
            f"Insufficient test data found in mailbox.\n"
            f"Expected at least {min_results} messages matching: {query}\n"
            f"Update tests/integration/config.yaml with a query that matches your mail."
        )

    return result["json"][0]["id"]


@pytest.fixture(scope="session")
def test_label() -> str:
    """Category name used by the label round-trip tests."""
    return TEST_CONFIG.get('label', {}).get('test_label', 'outlook-cli-test')
