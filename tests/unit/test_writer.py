from pathlib import Path

import yaml

from prefixes_agent.writer import PrefixFileWriter


def test_writer_creates_file(tmp_path: Path):
    writer = PrefixFileWriter(tmp_path / "out" / "prefixes.yaml")

    result = writer.write(["10.0.0.0/16", "10.96.0.0/12"])

    assert result.output_path.exists()
    assert yaml.safe_load(result.output_path.read_text()) == {
        "prefixes": ["10.0.0.0/16", "10.96.0.0/12"]
    }


def test_writer_skips_empty_entries_and_replaces(tmp_path: Path):
    writer = PrefixFileWriter(tmp_path / "prefixes.yaml")
    writer.write(["10.0.0.0/16", "10.96.0.0/12"])

    result = writer.write(["10.0.0.0/16", ""])

    assert result.prefixes == ["10.0.0.0/16"]
    assert yaml.safe_load(writer.path.read_text()) == {"prefixes": ["10.0.0.0/16"]}
    assert sorted(p.name for p in tmp_path.iterdir()) == ["prefixes.yaml"]


def test_writer_handles_cleared_prefixes(tmp_path: Path):
    writer = PrefixFileWriter(tmp_path / "prefixes.yaml")

    writer.write([])

    assert yaml.safe_load(writer.path.read_text()) == {"prefixes": []}
