import time
from pathlib import Path
from threading import Event, Thread

import yaml

from kubeadm_prefixes import ChangeNotifier
from prefixes_agent import main as agent_main
from prefixes_agent.writer import PrefixFileWriter


class StubSource:
    def __init__(self, notifier: ChangeNotifier):
        self.notifier = notifier
        self.current: list[str] = []

    def prefixes(self):
        return list(self.current)


def read_prefixes(path: Path):
    if not path.exists():
        return None
    return yaml.safe_load(path.read_text())["prefixes"]


def wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_consume_updates_writes_each_notification(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(agent_main, "NOTIFY_WAIT_TIMEOUT", 0.01)
    source = StubSource(ChangeNotifier())
    writer = PrefixFileWriter(tmp_path / "prefixes.yaml")
    stop_event = Event()
    results = []

    consumer = Thread(
        target=lambda: results.append(agent_main.consume_updates(source, stop_event, writer))
    )
    consumer.start()

    source.current = ["10.0.0.0/16", "10.96.0.0/12"]
    source.notifier.notify()
    assert wait_for(lambda: read_prefixes(writer.path) == ["10.0.0.0/16", "10.96.0.0/12"])

    source.current = []
    source.notifier.notify()
    assert wait_for(lambda: read_prefixes(writer.path) == [])

    stop_event.set()
    consumer.join(timeout=2)

    assert not consumer.is_alive()
    assert results == [2]


def test_consume_updates_without_writer_returns_on_stop():
    source = StubSource(ChangeNotifier())
    stop_event = Event()
    stop_event.set()

    assert agent_main.consume_updates(source, stop_event) == 0


def test_main_returns_error_without_cluster_credentials(monkeypatch):
    def no_credentials(kubeconfig=None):
        raise agent_main.RecordStoreError("no kubeconfig")

    monkeypatch.setattr(agent_main, "build_core_api", no_credentials)

    assert agent_main.main([]) == 1
