from __future__ import annotations

import tarfile
from pathlib import Path

from rdx.core.result import Err, Ok
from rdx.git.source import Source
from rdx.pipeline.archive import archive_name, build_archive, release_archive_name
from rdx.pipeline.binary import Binary
from rdx.platform.target import Target

NAME = "prometheus-rds-exporter"
DOCS = ("LICENSE", "CHANGELOG.md", "README.md")


def _fixture(tmp_path: Path) -> tuple[Source, Binary]:
    tree = tmp_path / "src"
    tree.mkdir()
    for doc in DOCS:
        (tree / doc).write_text(f"{doc}\n", encoding="utf-8")

    path = tmp_path / "bin" / NAME
    path.parent.mkdir()
    path.write_bytes(b"binary")

    source = Source(url="https://example.invalid/x.git", tag="v1.0.0", tree=tree)
    binary = Binary(path=path, target=Target("darwin", "arm64"), version="1.0.0", revision="abc")
    return source, binary


def test_names() -> None:
    assert archive_name(NAME) == "prometheus-rds-exporter.tar.gz"
    assert release_archive_name(NAME, "darwin", "arm64") == "prometheus-rds-exporter-darwin-arm64.tar.gz"


def test_archive_contains_binary_and_docs_at_root(tmp_path: Path) -> None:
    source, binary = _fixture(tmp_path)
    out = tmp_path / "dist" / archive_name(NAME)

    result = build_archive(source=source, binary=binary, out=out, binary_name=NAME, extra_files=DOCS)

    assert result == Ok(out)
    with tarfile.open(out, "r:gz") as tar:
        assert tar.getnames() == [NAME, *DOCS]
        member = tar.getmember(NAME)
        assert member.uid == 0 and member.gid == 0
        extracted = tar.extractfile(member)
        assert extracted is not None
        assert extracted.read() == b"binary"


def test_missing_doc_is_error(tmp_path: Path) -> None:
    source, binary = _fixture(tmp_path)
    (source.tree / "CHANGELOG.md").unlink()

    result = build_archive(
        source=source,
        binary=binary,
        out=tmp_path / "out.tar.gz",
        binary_name=NAME,
        extra_files=DOCS,
    )

    assert isinstance(result, Err)
    assert result.error.kind == "archive_failed"
    assert "CHANGELOG.md" in result.error.message
    assert not (tmp_path / "out.tar.gz").exists()
