from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from types import SimpleNamespace


def _runtime_app(port: int):
    return SimpleNamespace(
        state=SimpleNamespace(
            runtime=SimpleNamespace(
                config=SimpleNamespace(server=SimpleNamespace(host="127.0.0.1", port=port))
            )
        )
    )


def test_main_serves_on_configured_host_and_port(monkeypatch) -> None:
    from swingtrack import app as app_module

    seen_paths: list[Path | None] = []

    def _create_app(config_path=None):
        seen_paths.append(config_path)
        return _runtime_app(9100)

    monkeypatch.setattr(
        app_module.argparse.ArgumentParser,
        "parse_args",
        lambda self: Namespace(config=Path("/etc/swingtrack.yaml")),
    )
    monkeypatch.setattr(app_module, "create_app", _create_app)
    calls: list[dict] = []
    monkeypatch.setattr(app_module.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

    app_module.main()

    assert seen_paths == [Path("/etc/swingtrack.yaml")]
    assert calls == [{"host": "127.0.0.1", "port": 9100, "log_level": "info"}]


def test_server_cli_delegates_to_app_main(monkeypatch) -> None:
    from swingtrack import app as app_module
    from swingtrack import server_cli

    called = {"value": False}

    def _main() -> None:
        called["value"] = True

    monkeypatch.setattr(app_module, "main", _main)
    server_cli.main()
    assert called["value"] is True
