import pytest
import yaml

from evnet.config import resolve_config_path
from evnet.errors import ConfigurationError
from evnet.io import read_json, read_yaml
from evnet.route_table import load_route_table
from evnet.routing import RouteResolver
from evnet.scripts import precompute_routes as precompute_script
from evnet.scripts import run_all as run_all_script


@pytest.fixture
def routing_yaml(tmp_path):
    cfg = read_yaml(resolve_config_path("routing"))
    cfg["token_env"] = ["EVNET_SCRIPT_TOKEN"]
    cfg["batch_size"] = 10
    cfg["batch_delay_sec"] = 0.0
    cfg["output"]["route_table"] = str(tmp_path / "routes" / "precomputed_routes.json")
    path = tmp_path / "routing.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


def _raise_missing_token(*args, **kwargs):
    raise ConfigurationError("No routing access token found")


def test_precompute_without_token_writes_nothing(monkeypatch, tmp_path, routing_yaml):
    monkeypatch.delenv("EVNET_SCRIPT_TOKEN", raising=False)
    with pytest.raises(ConfigurationError):
        precompute_script.precompute_routes(routing=routing_yaml)
    assert not (tmp_path / "routes").exists()


def test_precompute_writes_table(monkeypatch, tmp_path, routing_yaml, dummy_client_factory):
    resolver = RouteResolver(dummy_client_factory(), sleep=lambda _: None)
    monkeypatch.setattr(precompute_script, "build_resolver", lambda cfg: resolver)
    precompute_script.precompute_routes(routing=routing_yaml)
    table = load_route_table(tmp_path / "routes" / "precomputed_routes.json")
    manifest = read_json(tmp_path / "routes" / "precomputed_routes_manifest.json")
    assert table
    assert manifest["counts"]["fetched"] == len(table)


def test_precompute_main_exits_with_message(monkeypatch, capsys):
    monkeypatch.setattr(precompute_script, "precompute_routes", _raise_missing_token)
    with pytest.raises(SystemExit) as info:
        precompute_script.main()
    assert info.value.code == 1
    assert "No routing access token found" in capsys.readouterr().err


def test_run_all_stops_on_missing_token(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(run_all_script, "generate_network", lambda: calls.append("network"))
    monkeypatch.setattr(run_all_script, "precompute_routes", _raise_missing_token)
    monkeypatch.setattr(run_all_script, "build_trips", lambda: calls.append("trips"))
    with pytest.raises(SystemExit) as info:
        run_all_script.main()
    assert info.value.code == 1
    assert calls == ["network"]
    assert "No routing access token found" in capsys.readouterr().err
