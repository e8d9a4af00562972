#!/usr/bin/env python3
"""
Demo: Decode and re-encode /etc/passwd style records.

Shows the built-in passwd layout, a dataclass-driven record, and how the
same field text changes meaning with the requested shape.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from udsv import (
    UDSVError,
    builtin_layout,
    record_from_text,
    record_to_text,
    records_from_text,
)


PASSWD = """\
root:x:0:0:root:/root:/bin/bash
daemon:x:1:1:daemon:/usr/sbin:/usr/sbin/nologin
alice:x:1000:1000:Alice Liddell,,,:/home/alice:/bin/zsh
"""


@dataclass
class Service:
    name: str
    enabled: bool
    ports: List[int]
    env: Dict[str, str]
    note: Optional[str]


def main():
    print("=" * 80)
    print("UDSV DEMO")
    print("=" * 80)

    layout = builtin_layout("passwd")
    print(f"\nLayout: {layout.name} ({', '.join(layout.field_names)})")
    print("-" * 80)
    for entry in records_from_text(PASSWD, layout):
        print(f"{entry['user']:<8} uid={entry['uid']:<5} shell={entry['shell']}")

    print("\nDataclass record:")
    print("-" * 80)
    svc = Service("web", True, [80, 443], {"MODE": "a=b", "PATH": "/srv:/opt"}, None)
    text = record_to_text(svc, Service)
    print(text)
    print(record_from_text(text, Service))

    print("\nSame text, different shapes:")
    print("-" * 80)
    for shape in (str, List[str]):
        print(f"{shape!s:<20} {record_from_text('a,b', shape)!r}")

    print("\nErrors are structured:")
    print("-" * 80)
    try:
        record_from_text("a=b=c", Dict[str, str])
    except UDSVError as e:
        print(f"{e.kind}: fragment={e.fragment!r} offset={e.offset}")

    print("=" * 80)


if __name__ == "__main__":
    main()
