"""3D Grapher - Configuration to Pack Compiler."""
from __future__ import annotations

import hashlib
import json
import shutil
from datetime import datetime, timezone
from pathlib import Path

import click
from nacl.signing import SigningKey

from grapher_core.config import GrapherConfig, load_config
from grapher_core.ids import build_id
from grapher_core.protocol import SURFACE_NAMES
from grapher_compile.pack import build_pack

# Deterministic demo publisher key.
# This must match governance/trust_store.json so `grapher-verify` can validate
# packs out-of-the-box.
CANONICAL_PUBLISHER_SEED = bytes.fromhex(
    "a665a45920422f9d417e4867efdc4fb8a04a1f3fff1fa07e998e86f7f7a27ae3"
)

# Fixed timestamp for deterministic gold packs
GOLD_TIMESTAMP = "2026-01-01T00:00:00Z"

SIGNATURE_FILES = {"manifest.json", "manifest.sig", "publisher.pub"}


def _prepare_output(out_path: Path) -> None:
    """Empty a previous pack; refuse to touch anything else."""
    if out_path.exists():
        if not out_path.is_dir():
            raise ValueError(f"Output {out_path} exists and is not a directory")
        if any(out_path.iterdir()):
            if not (out_path / "pack.mcmeta").exists():
                raise ValueError(f"Refusing to overwrite non-pack directory {out_path}")
            shutil.rmtree(out_path)
    out_path.mkdir(parents=True, exist_ok=True)


def integrity_root(out_path: Path) -> tuple[str, list[str]]:
    """Per-file leaf hashes over (rel_path + \\0 + bytes), accumulated with sha256."""
    all_files = [
        f for f in out_path.rglob("*")
        if f.is_file() and f.name not in SIGNATURE_FILES
    ]
    files_rel = sorted(f.relative_to(out_path).as_posix() for f in all_files)

    acc = hashlib.sha256()
    for rel in files_rel:
        h = hashlib.sha256()
        h.update(rel.encode("utf-8"))
        h.update(b"\x00")
        h.update((out_path / rel).read_bytes())
        acc.update(h.digest())
    return acc.hexdigest(), files_rel


def compile_pack(
    config: GrapherConfig,
    out_path: Path,
    signing_key: bytes | None = None,
    timestamp: str | None = None,
) -> None:
    """Compile a configuration into a signed pack directory."""
    print(f"Compiling pack: {config.namespace} (resolution {config.resolution})")

    sk = SigningKey(signing_key if signing_key is not None else CANONICAL_PUBLISHER_SEED)

    if timestamp is None:
        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

    # 1. Build the function table
    pack = build_pack(config)
    files = pack.files()

    # 2. Write files
    print("Writing files...")
    _prepare_output(out_path)
    for rel, content in files.items():
        p = out_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(content)

    # 3. Integrity root
    root, files_rel = integrity_root(out_path)

    # 4. Create and sign manifest
    config_json = config.canonical_json()
    manifest = {
        "spec": "1.0",
        "created": timestamp,
        "build_id": build_id(config_json),
        "config_hash": hashlib.sha256(config_json.encode("utf-8")).hexdigest(),
        "config": config.to_dict(),
        "integrity": {
            "schema": "grapher-merkle-v1",
            "algorithm": "sha256",
            "files": files_rel,
            "merkle_root": root,
        },
        "publisher": {"pubkey": sk.verify_key.encode().hex()},
    }

    man_bytes = json.dumps(
        manifest, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")

    (out_path / "sig").mkdir(exist_ok=True)
    (out_path / "manifest.json").write_bytes(man_bytes)
    (out_path / "sig/manifest.sig").write_bytes(sk.sign(man_bytes).signature)
    (out_path / "sig/publisher.pub").write_bytes(bytes(sk.verify_key))

    print(f"PASS: Pack generated at {out_path}")
    print(f"  Functions: {len(pack.functions)}")
    print(f"  Markers: {config.x_size * config.z_size}")
    print(f"  Constants: {len(pack.allocator.constants)}")


@click.command()
@click.argument("out", type=click.Path(path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON file of configuration overrides")
@click.option("--resolution", type=int, help="Fixed-point resolution R")
@click.option("--surface", type=click.Choice(SURFACE_NAMES), help="Surface to animate every tick")
@click.option("--gold", is_flag=True, help="Use canonical key and timestamp for a reproducible pack")
def main(out: Path, config_path: Path | None, resolution: int | None, surface: str | None, gold: bool) -> None:
    """Compile the grapher into a pack."""
    try:
        config = load_config(config_path, resolution=resolution, tick_surface=surface)
        if gold:
            compile_pack(config, out, signing_key=CANONICAL_PUBLISHER_SEED, timestamp=GOLD_TIMESTAMP)
        else:
            compile_pack(config, out)
    except Exception as e:
        # Fail closed, with a single-line reason.
        msg = str(e)
        print(msg if msg.startswith("FATAL") else f"FATAL: {msg}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
