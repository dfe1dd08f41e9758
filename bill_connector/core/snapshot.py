"""Sync snapshot file: one JSON record per line, optionally HMAC-signed.

Records are written to a temporary file next to the target and moved into
place only when the sync completes, so a failed run never replaces the last
good snapshot.

Record layout:
    {"timestamp": "...", "kind": "resource", "data": {...}, "signature": "..."}
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Literal, Optional

logger = logging.getLogger(__name__)

RecordKind = Literal["resource_type", "resource", "entitlement", "grant"]


def _sign_record(record: dict[str, Any], signing_key: bytes) -> str:
    """Generate HMAC-SHA256 signature for a snapshot record."""
    if not signing_key:
        return ""
    # Canonical JSON representation for signing
    canonical = json.dumps(record, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


class SnapshotWriter:
    """Write sync output atomically.

    Usage:
        with SnapshotWriter("sync.jsonl", signing_key="k") as writer:
            writer.write("resource", resource.to_dict())
    """

    def __init__(self, path: str | Path, signing_key: str = ""):
        self.path = Path(path)
        self._signing_key = signing_key.encode("utf-8")
        self._tmp_path: Optional[Path] = None
        self._file: Optional[IO[str]] = None
        self.counts: Dict[str, int] = {}

    def __enter__(self) -> "SnapshotWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.discard()
        return False

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix="sync-", suffix=".jsonl.tmp", dir=self.path.parent)
        self._tmp_path = Path(tmp_name)
        self._file = os.fdopen(fd, "w", encoding="utf-8")
        logger.debug(f"Writing snapshot to temp file {self._tmp_path}")

    def write(self, kind: RecordKind, data: dict[str, Any]) -> None:
        if self._file is None:
            raise RuntimeError("snapshot writer is not open")

        record: dict[str, Any] = {
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "kind": kind,
            "data": data,
        }
        signature = _sign_record(record, self._signing_key)
        if signature:
            record["signature"] = signature

        self._file.write(json.dumps(record, ensure_ascii=False) + "\n")
        self.counts[kind] = self.counts.get(kind, 0) + 1

    def commit(self) -> None:
        """Move the temp file over the target path."""
        if self._file is None or self._tmp_path is None:
            raise RuntimeError("unexpected state - snapshot writer is not open")
        self._file.close()
        self._file = None
        self._tmp_path.chmod(0o600)
        os.replace(self._tmp_path, self.path)
        logger.info(f"Saved snapshot {self.path} ({sum(self.counts.values())} records)")
        self._tmp_path = None

    def discard(self) -> None:
        """Drop the temp file; the target path is left untouched."""
        if self._file is not None:
            self._file.close()
            self._file = None
        if self._tmp_path is not None:
            self._tmp_path.unlink(missing_ok=True)
            logger.debug(f"Discarded snapshot temp file {self._tmp_path}")
            self._tmp_path = None


def read_snapshot(path: str | Path) -> Iterator[dict[str, Any]]:
    """Yield the records of a snapshot file, skipping blank lines."""
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield json.loads(line)


def verify_snapshot(path: str | Path, signing_key: str) -> tuple[int, int]:
    """Verify all signatures in a snapshot file.

    Returns:
        Tuple of (total_records, valid_signatures)
    """
    snapshot = Path(path)
    if not snapshot.exists():
        return 0, 0

    key = signing_key.encode("utf-8")
    total = 0
    valid = 0

    with snapshot.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            stored_sig = record.pop("signature", "")
            if not stored_sig:
                continue
            computed_sig = _sign_record(record, key)
            if computed_sig and hmac.compare_digest(stored_sig, computed_sig):
                valid += 1

    return total, valid
