import logging

import pytest

import main
from tests.conftest import FakeFetcher


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    before, level = set(root.handlers), root.level
    yield
    for handler in [h for h in root.handlers if h not in before]:
        root.removeHandler(handler)
        handler.close()
    main._handlers.clear()
    root.setLevel(level)


def test_iemod_run(modern_mod, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

    assert main.main(["-C", str(modern_mod)]) == 0
    assert (modern_mod / "mymod-v1.2.iemod").exists()
    assert (tmp_path / "PACKAGE_NAME").read_text(encoding="utf-8") == "mymod-v1.2.iemod\n"


def test_invalid_token_exits_before_packaging(modern_mod, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main.main(["-C", str(modern_mod), "colour=blue"]) == 1
    assert list(modern_mod.glob("*.iemod")) == []
    assert not (tmp_path / "PACKAGE_NAME").exists()


def test_unsupported_weidu_version(modern_mod, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main.main(["-C", str(modern_mod), "weidu=200"]) == 1


def test_no_mod_found(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main.main(["-C", str(tmp_path)]) == 1


def test_platform_run_with_fetcher(modern_mod, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    out = tmp_path / "dist"

    code = main.main(
        ["-C", str(modern_mod), "-o", str(out), "type=windows", "suffix=none"],
        fetcher=FakeFetcher(),
    )

    assert code == 0
    assert (out / "win-mymod.zip").exists()


def test_log_file(modern_mod, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
    log_file = tmp_path / "logs" / "packager.log"

    assert main.main(["-C", str(modern_mod), "--log-file", str(log_file)]) == 0
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "Archive type: iemod" in log_file.read_text(encoding="utf-8")
