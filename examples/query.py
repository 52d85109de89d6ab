"""Query a marker trace - height envelope of the surface per tick."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <trace.parquet> [marker]")
        print("Example: grapher-trace trace.parquet --surface ripple && python query.py trace.parquet 40")
        sys.exit(1)

    trace = Path(sys.argv[1])
    marker = int(sys.argv[2]) if len(sys.argv) > 2 else None

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW trace AS SELECT * FROM '{trace}'")

    print(f"--- Height envelope: {trace} ---\n")
    df = con.execute(
        """
        SELECT tick, min(y) AS low, max(y) AS high, any_value(frame) AS frame
        FROM trace
        GROUP BY tick
        ORDER BY tick
        """
    ).fetchdf()
    if df.empty:
        print("Trace is empty.")
        return
    for _, row in df.iterrows():
        print(f"tick {int(row['tick']):4d}  frame {int(row['frame']):6d}  y in [{row['low']:.3f}, {row['high']:.3f}]")

    if marker is not None:
        print(f"\n--- Marker {marker} ---\n")
        df = con.execute(
            "SELECT tick, x, z, y, head_item FROM trace WHERE marker = ? ORDER BY tick",
            [marker],
        ).fetchdf()
        for _, row in df.iterrows():
            print(f"tick {int(row['tick']):4d}  ({row['x']:.2f}, {row['z']:.2f})  y={row['y']:.3f}  {row['head_item']}")


if __name__ == "__main__":
    main()
