#!/usr/bin/env python3
"""
Simple demo of the binary object log.

Writes a handful of typed records, reads them back, then simulates a crash
in the middle of an append and shows that the earlier records survive.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from objectlog import BinaryLog, ReadHalt


@dataclass
class Dummy:
    id: int
    comment: str
    objects: List[dict] = field(default_factory=list)


def report_halt(halt: ReadHalt) -> None:
    if not halt.clean:
        print(f"  ⚠️  Stopped at byte {halt.position}: {halt.reason.value} ({halt.detail})")


def main():
    print("=" * 60)
    print("objectlog - Binary Log Demo")
    print("=" * 60)
    
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "dummies.log"
        
        print("\n[1] Appending 5 records...")
        with BinaryLog(path, record_type=Dummy, on_halt=report_halt) as log:
            for i in range(5):
                dummy = Dummy(
                    id=i,
                    comment="test",
                    objects=[{"a": i, "b": i} for _ in range(3)],
                )
                size = log.append(dummy)
                print(f"  ✅ Wrote record {i} ({size} bytes)")
            
            print("\n[2] Reading records back...")
            for dummy in log.records():
                print(f"  ✅ Dummy found! {dummy}")
        
        print("\n[3] Simulating a crash in the middle of the last append...")
        os.truncate(path, os.path.getsize(path) - 3)
        
        with BinaryLog(path, record_type=Dummy, on_halt=report_halt) as log:
            recovered = list(log.records())
        
        print(f"  ✅ Recovered {len(recovered)} of 5 records")
    
    print("\n" + "=" * 60)
    print("Demo completed successfully!")
    print("=" * 60)


if __name__ == '__main__':
    main()
