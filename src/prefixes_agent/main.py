"""Entry point for the standalone kubeadm prefixes agent."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from threading import Event
from typing import Optional

from kubeadm_prefixes import KubeAdmPrefixSource, RecordStoreError, create_prefix_source
from kubeadm_prefixes.kubernetes_store import KubernetesRecordStore, build_core_api

from .config import load_config
from .writer import PrefixFileWriter

LOG = logging.getLogger(__name__)

NOTIFY_WAIT_TIMEOUT = 1.0
SHUTDOWN_JOIN_TIMEOUT = 5.0


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def consume_updates(
    source: KubeAdmPrefixSource,
    stop_event: Event,
    writer: Optional[PrefixFileWriter] = None,
) -> int:
    """Relay notifications until ``stop_event`` is set; return the update count."""

    updates = 0
    while not stop_event.is_set():
        if not source.notifier.wait(NOTIFY_WAIT_TIMEOUT):
            continue
        prefixes = source.prefixes()
        updates += 1
        LOG.info("kubeadm prefixes updated: %s", prefixes or "(none)")
        if writer is not None:
            try:
                writer.write(prefixes)
            except OSError:
                LOG.exception("failed to write prefixes to %s", writer.path)
    return updates


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Publish the pod and service subnets recorded by kubeadm"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    config = load_config(args.config)

    try:
        core_api = build_core_api(config.kubernetes.kubeconfig)
    except RecordStoreError as exc:
        LOG.error("%s", exc)
        return 1

    stop_event = Event()
    store = KubernetesRecordStore(
        core_api, timeout_seconds=config.kubernetes.watch_timeout
    )
    source = create_prefix_source(
        store,
        stop_event,
        mode=config.source.mode,
        interval=config.source.interval,
        coalesce=config.source.coalesce,
        reconnect_attempts=config.source.reconnect_attempts,
    )
    writer = PrefixFileWriter(config.output.path) if config.output.path else None

    def _shutdown(signum, frame):  # pragma: no cover - signal handler
        LOG.info("received signal %s, shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    source.start()
    try:
        consume_updates(source, stop_event, writer)
    except KeyboardInterrupt:  # pragma: no cover - fallback if signal not set
        stop_event.set()

    source.stop()
    # A blocked watch read ends with its window.
    source.join(config.kubernetes.watch_timeout + SHUTDOWN_JOIN_TIMEOUT)
    LOG.info("kubeadm prefixes agent stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
