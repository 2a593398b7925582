#!/usr/bin/env python3
"""
Demo of the textual JSON log and its per-document error reporting.
"""

import tempfile
from pathlib import Path

from objectlog import TextLog


def main():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "events.jsonlog"
        
        with TextLog(path) as log:
            for i in range(3):
                log.append({"id": i, "event": f"step-{i}"})
        
        # A writer that died halfway through a document.
        with open(path, "ab") as f:
            f.write(b'{"id": 3, "ev')
        
        with TextLog(path) as log:
            for entry in log.records():
                if entry.ok:
                    print(f"✅ {entry.position:>4}: {entry.value}")
                else:
                    print(f"❌ {entry.position:>4}: {entry.error}")


if __name__ == '__main__':
    main()
