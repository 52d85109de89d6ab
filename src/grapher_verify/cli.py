from __future__ import annotations

import json
from pathlib import Path
import click
from .logic import verify_pack

@click.group()
def main():
    pass

@main.command("pack")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--root", type=click.Path(exists=True, file_okay=False, path_type=Path), default=None,
              help="Directory holding governance/trust_store.json")
def pack_cmd(path: Path, root: Path | None):
    result = verify_pack(path, repo_root=root)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
