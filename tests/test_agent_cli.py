from webcalc.agent import OrchestratorPort
from webcalc.agent_cli import build_agent, main
from webcalc.client import HttpOrchestratorClient
from webcalc.config import AgentSettings, OrchestratorEndpointConfig


def test_build_agent_uses_endpoint_settings():
    settings = AgentSettings(
        orchestrator=OrchestratorEndpointConfig(
            host="orch", port=9000, timeout=250, max_retries=2, base_retry_delay=1
        )
    )
    agent = build_agent(settings)
    client = agent.orchestrator
    assert isinstance(client, HttpOrchestratorClient)
    assert client.base_url == "http://orch:9000"
    assert client.timeout == 0.25
    assert (client.max_retries, client.base_retry_delay) == (2, 1)


def test_build_agent_client_satisfies_port():
    agent = build_agent(AgentSettings())
    assert isinstance(agent.orchestrator, OrchestratorPort)
    assert agent.orchestrator.base_url == "http://localhost:50052"


def test_main_fails_on_bad_config(tmp_path, monkeypatch):
    monkeypatch.setenv("AGENT_COMPUTING_POWER", "many")
    assert main(["--env-file", str(tmp_path / "missing.env")]) == 1


def test_main_ends_when_no_workers(tmp_path, monkeypatch):
    monkeypatch.setenv("AGENT_COMPUTING_POWER", "0")
    assert main(["--env-file", str(tmp_path / "missing.env")]) == 0


def test_main_reads_env_file(tmp_path, monkeypatch):
    monkeypatch.delenv("AGENT_COMPUTING_POWER", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("AGENT_COMPUTING_POWER=0\n")
    assert main(["--env-file", str(env_file)]) == 0