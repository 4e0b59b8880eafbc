"""Record per-block padding and state values and save them as YAML.

Pass a `BlockTrace` as the observer of a digest computation:

    trace = BlockTrace(name="notes.txt")
    digest = digest_file("notes.txt", observer=trace)
    trace.dump("notes.yaml")
"""

from __future__ import annotations

from typing import Dict, List, Optional

import yaml

from sha256_engine import BlockRecord


class BlockTrace:
    """Observer that keeps one entry per compressed block."""

    def __init__(self, name: str = "<stream>") -> None:
        self.name = name
        self.blocks: List[Dict] = []
        self.digest_hex: Optional[str] = None

    def __call__(self, record: BlockRecord) -> None:
        self.blocks.append(
            {
                "block_index": record.index,
                "padding_case": record.case.name,
                "words": [f"{w:08x}" for w in record.words],
                "state": [f"{h:08x}" for h in record.state],
            }
        )

    def to_dict(self) -> Dict:
        return {
            "input": self.name,
            "digest_hex": self.digest_hex,
            "total_blocks": len(self.blocks),
            "blocks": self.blocks,
        }

    def dump(self, path: str) -> None:
        """Write the trace to `path` as YAML."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
