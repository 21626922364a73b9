import pytest


@pytest.fixture(autouse=True)
def _isolated_policy_location(monkeypatch, tmp_path):
    """Keep policy discovery away from the developer's working directory."""
    monkeypatch.delenv("NIMBUS_SAFETY_POLICY", raising=False)
    monkeypatch.chdir(tmp_path)
