from pathlib import Path
import hashlib

def leaf_hash(rel_path: str, content: bytes) -> bytes:
    h = hashlib.sha256()
    h.update(rel_path.encode("utf-8"))
    h.update(b"\x00")
    h.update(content)
    return h.digest()

def compute_integrity_root(root_dir: Path, rel_files: list[str]) -> str:
    acc = hashlib.sha256()
    for rel in sorted(rel_files):
        p = root_dir / rel
        acc.update(leaf_hash(rel, p.read_bytes()))
    return acc.hexdigest()

def looks_like_mcfunction(p: Path) -> bool:
    """UTF-8 text, at least one command, no slash prefixes or blank lines."""
    try:
        text = p.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        return False
    lines = text.splitlines()
    if not lines:
        return False
    return all(line.strip() and not line.startswith("/") for line in lines)
