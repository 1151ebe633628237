import socket
import tomllib

import pytest

from homethings.lights.cli import Configuration, main
from homethings.lights.command import Action, Subject
from homethings.lights.writer import encode


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "platformdirs.user_config_dir", lambda *args, **kwargs: str(tmp_path)
    )
    return tmp_path


@pytest.fixture
def controller():
    server = socket.create_server(("127.0.0.1", 0))
    server.settimeout(5)
    with server:
        yield server


def _received(server):
    connection, _ = server.accept()
    with connection:
        connection.settimeout(5)
        return connection.recv(16)


def _closed_port():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


def test_print_config_path_creates_default_file(config_dir, capsys):
    assert main(["-c"]) == 0
    path = config_dir / "lights.toml"
    assert capsys.readouterr().out.strip() == str(path)
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    assert data == {"address": Configuration().address}


def test_sends_signal_to_given_address(config_dir, controller, capsys):
    port = controller.getsockname()[1]
    assert main(["-a", f"127.0.0.1:{port}", "-s", "Kitchen"]) == 0
    assert _received(controller) == encode(Subject.KITCHEN, Action.PULSE)
    assert "Sending a Pulse to Kitchen…" in capsys.readouterr().out


def test_uses_address_from_configuration(config_dir, controller):
    port = controller.getsockname()[1]
    (config_dir / "lights.toml").write_text(
        f'address = "127.0.0.1:{port}"\n', encoding="utf-8"
    )
    assert main([]) == 0
    assert _received(controller) == encode(Subject.LIVING_ROOM, Action.PULSE)


def test_unreachable_controller_fails(config_dir, capsys):
    assert main(["-a", f"127.0.0.1:{_closed_port()}"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_invalid_configured_address_fails(config_dir, capsys):
    (config_dir / "lights.toml").write_text('address = "nowhere"\n', encoding="utf-8")
    assert main([]) == 1
    assert "Error:" in capsys.readouterr().err


def test_invalid_subject_exits(config_dir):
    with pytest.raises(SystemExit):
        main(["-s", "Attic"])