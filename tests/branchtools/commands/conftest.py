import pytest

import branchtools.log as branchtools_log


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(branchtools_log, "_configured_level", branchtools_log.LogLevel.INFO)
    for name in ("BRANCHTOOLS_GIT_PATH", "BRANCHTOOLS_MAX_WORKERS"):
        monkeypatch.delenv(name, raising=False)
