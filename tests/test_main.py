import io
import json

import pytest

import main
from config import Settings

PROBE = "https://probe.test/"
LIST_A = "https://a.test/hosts"
LIST_B = "https://b.test/hosts"


@pytest.fixture
def flushes(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "flush_dns_cache", lambda: calls.append(True))
    return calls


@pytest.fixture
def settings(tmp_path, fake_web):
    base = tmp_path / "hosts.base"
    base.write_text("# my entries\n127.0.0.1\tlocalhost\n10.0.0.2\tnas.lan\n", encoding="utf-8")
    hosts = tmp_path / "hosts"
    hosts.write_text("previous\n", encoding="utf-8")

    fake_web.pages[PROBE] = ""
    fake_web.pages[LIST_A] = "# list a\n127.0.0.1 localhost\n0.0.0.0 zeta.com\n0.0.0.0 alpha.com#ad\n"
    fake_web.pages[LIST_B] = "127.0.0.1 alpha.com\n127.0.0.1 mid.org  # tracker\nmid.org\n"

    return Settings(
        sources=[LIST_A, LIST_B],
        block_ip="0.0.0.0",
        base_hosts=str(base),
        hosts_path=str(hosts),
        probe_url=PROBE,
    )


def test_run_writes_hosts_and_flushes(settings, fake_web, flushes):
    assert main.run(settings) == main.EXIT_OK

    lines = open(settings.hosts_path, encoding="utf-8").read().splitlines()
    header = [line for line in lines if line.startswith("#") and line != "# my entries"]
    assert "# Blocked Domains: 3" in header
    body = lines[len(header):]
    assert body == [
        "# my entries",
        "127.0.0.1\tlocalhost",
        "10.0.0.2\tnas.lan",
        "0.0.0.0\talpha.com",
        "0.0.0.0\tmid.org",
        "0.0.0.0\tzeta.com",
    ]
    assert fake_web.requested == [PROBE, LIST_A, LIST_B]
    assert flushes == [True]


def test_run_custom_ip(settings, flushes):
    settings.block_ip = "127.0.0.1"
    assert main.run(settings) == main.EXIT_OK
    content = open(settings.hosts_path, encoding="utf-8").read()
    assert "127.0.0.1\tzeta.com\n" in content
    assert "0.0.0.0\t" not in content


def test_run_no_connectivity(settings, fake_web, flushes):
    del fake_web.pages[PROBE]
    assert main.run(settings) == main.EXIT_NO_CONNECTIVITY
    assert fake_web.requested == [PROBE]
    assert open(settings.hosts_path).read() == "previous\n"
    assert flushes == []


def test_run_failed_source_aborts(settings, fake_web, flushes):
    del fake_web.pages[LIST_B]
    assert main.run(settings) == main.EXIT_ERROR
    assert open(settings.hosts_path).read() == "previous\n"
    assert flushes == []


def test_run_missing_base_file(settings, fake_web, flushes):
    settings.base_hosts = settings.base_hosts + ".missing"
    assert main.run(settings) == main.EXIT_ERROR
    assert fake_web.requested == [PROBE]


def test_run_flush_failure(settings, monkeypatch):
    def broken():
        raise OSError("resolvectl: not found")

    monkeypatch.setattr(main, "flush_dns_cache", broken)
    assert main.run(settings) == main.EXIT_ERROR
    assert "zeta.com" in open(settings.hosts_path).read()


def test_run_no_flush(settings, flushes):
    settings.flush = False
    assert main.run(settings) == main.EXIT_OK
    assert flushes == []


def test_dry_run_prints_only(settings, flushes):
    settings.dry_run = True
    out = io.StringIO()
    assert main.run(settings, out) == main.EXIT_OK
    assert "0.0.0.0\tmid.org\n" in out.getvalue()
    assert open(settings.hosts_path).read() == "previous\n"
    assert flushes == []


def test_main_cli_exit_codes(settings, tmp_path, flushes):
    with pytest.raises(SystemExit) as exc:
        main.main([
            "--base", settings.base_hosts,
            "--hosts", settings.hosts_path,
            "-s", LIST_A,
            "--ip", "0.0.0.0",
            "--no-flush",
            "--config", _config(tmp_path, probe_url=PROBE),
        ])
    assert exc.value.code == 0
    content = open(settings.hosts_path).read()
    assert "0.0.0.0\tzeta.com" in content
    assert "mid.org" not in content
    assert flushes == []


def test_main_bad_config(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main.main(["--config", _config(tmp_path, block_ip="nope")])
    assert exc.value.code == main.EXIT_ERROR


def _config(tmp_path, **values):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(values))
    return str(path)


@pytest.mark.parametrize("argv", [["--bogus"], ["--ip"], ["extra-positional"]])
def test_main_usage_error_is_not_connectivity_code(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main.main(argv)
    assert exc.value.code == main.EXIT_ERROR
    assert "usage: hostsblock" in capsys.readouterr().err


def test_module_logger_name():
    assert main.logger.name == "main"
