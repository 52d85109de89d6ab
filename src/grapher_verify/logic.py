import json
from pathlib import Path
from .const import ERRORS
from .crypto import verify_ed25519
from .merkle import compute_integrity_root, looks_like_mcfunction

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}
TAG_FILES = ("data/minecraft/tags/functions/load.json", "data/minecraft/tags/functions/tick.json")

def _load_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))

def _canonical_json_bytes(obj) -> bytes:
    return json.dumps(obj, **CANONICAL_JSON_KW).encode("utf-8")

def _fail(errors: list, code: str, **extra) -> dict:
    errors.append({"code": code, "message": ERRORS[code], **extra})
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}

def _function_file(fid: str) -> str:
    namespace, _, path = fid.partition(":")
    return f"data/{namespace}/functions/{path}.mcfunction"

def verify_pack(pack_dir: Path, repo_root: Path | None = None) -> dict:
    errors = []
    # Packs may live anywhere on disk, so do not assume a fixed parent depth.
    if repo_root is None:
        cur = pack_dir.resolve()
        found: Path | None = None
        for p in (cur,) + tuple(cur.parents):
            if (p / "governance" / "trust_store.json").exists() or (p / "pyproject.toml").exists():
                found = p
                break
        repo_root = found or cur

    manifest_path = pack_dir / "manifest.json"
    sig_path = pack_dir / "sig" / "manifest.sig"
    pub_path = pack_dir / "sig" / "publisher.pub"
    meta_path = pack_dir / "pack.mcmeta"
    gov_trust = repo_root / "governance" / "trust_store.json"

    for p in [meta_path, manifest_path, sig_path, pub_path]:
        if not p.exists():
            return _fail(errors, "E_LAYOUT_MISSING", path=str(p))

    try:
        manifest_obj = _load_json(manifest_path)
    except Exception as e:
        return _fail(errors, "E_MANIFEST_JSON", detail=str(e))

    canonical_bytes = _canonical_json_bytes(manifest_obj)
    pub = pub_path.read_bytes()
    sig = sig_path.read_bytes()
    if not verify_ed25519(pub, canonical_bytes, sig):
        return _fail(errors, "E_SIG_INVALID")

    integrity = manifest_obj.get("integrity", {})
    expected_root = integrity.get("merkle_root", "")
    rel_files = integrity.get("files", [])

    try:
        computed = compute_integrity_root(pack_dir, rel_files)
    except Exception as e:
        return _fail(errors, "E_INTEGRITY_MISMATCH", detail=str(e))
    if expected_root != computed:
        return _fail(errors, "E_INTEGRITY_MISMATCH", expected=expected_root, computed=computed)

    for rel in rel_files:
        if rel.endswith(".mcfunction"):
            p = pack_dir / rel
            if not looks_like_mcfunction(p):
                return _fail(errors, "E_FUNCTION_MALFORMED", path=str(p))

    for rel in TAG_FILES:
        if rel in rel_files:
            for fid in _load_json(pack_dir / rel).get("values", []):
                if _function_file(fid) not in rel_files:
                    return _fail(errors, "E_TAG_DANGLING", tag=rel, function=fid)

    trust = _load_json(gov_trust) if gov_trust.exists() else {"trusted_publishers":[]}
    trusted = set([x.lower() for x in trust.get("trusted_publishers", [])])
    pub_hex = pub.hex().lower()
    if pub_hex not in trusted:
        return _fail(errors, "E_POLICY_TRUST", publisher_pub=pub_hex)

    return {"status":"PASS","error_count":0,"errors":[]}
