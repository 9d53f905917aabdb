from pathlib import Path

import pytest

from kubeadm_prefixes import SourceMode
from prefixes_agent.config import load_config


def test_load_config(tmp_path: Path):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text(
        """
source:
  mode: poll
  interval: 2
  reconnect_attempts: 3
  coalesce: true
kubernetes:
  kubeconfig: /etc/kubernetes/admin.conf
  watch_timeout: 30
output:
  path: /var/lib/kubeadm-prefixes/prefixes.yaml
"""
    )

    cfg = load_config(config_path)

    assert cfg.source.mode is SourceMode.POLL
    assert cfg.source.interval == pytest.approx(2.0)
    assert cfg.source.reconnect_attempts == 3
    assert cfg.source.coalesce is True
    assert cfg.kubernetes.kubeconfig == "/etc/kubernetes/admin.conf"
    assert cfg.kubernetes.watch_timeout == 30
    assert cfg.output.path == Path("/var/lib/kubeadm-prefixes/prefixes.yaml")


def test_load_config_defaults(tmp_path: Path):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text("source:\n  poll_interval: 30\n")

    cfg = load_config(config_path)

    assert cfg.source.mode is SourceMode.WATCH
    assert cfg.source.interval == pytest.approx(30.0)
    assert cfg.source.reconnect_attempts == 0
    assert cfg.source.coalesce is False
    assert cfg.kubernetes.kubeconfig is None
    assert cfg.kubernetes.watch_timeout == 10
    assert cfg.output.path is None


def test_load_config_without_file():
    cfg = load_config(None)

    assert cfg.source.mode is SourceMode.WATCH
    assert cfg.source.interval == pytest.approx(10.0)


def test_load_config_empty_file(tmp_path: Path):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text("")

    assert load_config(config_path).source.mode is SourceMode.WATCH


@pytest.mark.parametrize(
    "content",
    [
        "- not\n- a mapping\n",
        "source: poll\n",
        "source:\n  mode: informer\n",
        "source:\n  interval: 0\n",
        "source:\n  reconnect_attempts: -1\n",
        "kubernetes:\n  watch_timeout: 0\n",
        "output: [a]\n",
    ],
)
def test_load_config_rejects_invalid_content(tmp_path: Path, content: str):
    config_path = tmp_path / "agent.yaml"
    config_path.write_text(content)

    with pytest.raises(ValueError):
        load_config(config_path)
