"""capi2mapi — convert Cluster API PowerVS machines to Machine API manifests."""

import argparse
import os
import sys
from pathlib import Path

import yaml

from capi2mapi.pacts.types import RawExtension
from capi2mapi.core.convert import convert


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_manifests(rendered_dir: str) -> dict[str, list[dict]]:
    """Load all YAML files from rendered_dir, classify by kind."""
    manifests: dict[str, list[dict]] = {}
    rendered = Path(rendered_dir)
    files = sorted(set(rendered.rglob("*.yaml")) | set(rendered.rglob("*.yml")))
    for yaml_file in files:
        with open(yaml_file, encoding="utf-8") as f:
            for doc in yaml.safe_load_all(f):
                if not doc or not isinstance(doc, dict):
                    continue
                kind = doc.get("kind", "Unknown")
                manifests.setdefault(kind, []).append(doc)
    return manifests


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def load_config(path: str) -> dict:
    """Load capi2mapi.yaml or return empty config."""
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    else:
        cfg = {}
    cfg.setdefault("capi2mapiVersion", "v1")
    cfg.setdefault("namespace", "openshift-machine-api")
    cfg.setdefault("exclude", [])
    return cfg


def save_config(path: str, config: dict) -> None:
    """Write capi2mapi.yaml."""
    header = "# Configuration descriptor for capi2mapi\n\n"
    # Ensure version key comes first
    ordered = {"capi2mapiVersion": config.get("capi2mapiVersion", "v1")}
    for k, v in config.items():
        if k != "capi2mapiVersion":
            ordered[k] = v
    with open(path, "w", encoding="utf-8") as f:
        f.write(header)
        yaml.dump(ordered, f, default_flow_style=False, sort_keys=False)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def _render(obj):
    """Replace RawExtension payloads with their decoded objects for YAML output."""
    if isinstance(obj, RawExtension):
        return obj.to_object()
    if isinstance(obj, dict):
        return {k: _render(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_render(item) for item in obj]
    return obj


def write_output(objects: list[dict], output_dir: str,
                 output_file: str = "mapi.yml") -> str:
    """Write converted MAPI objects as a multi-document YAML file."""
    path = os.path.join(output_dir, output_file)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Generated by capi2mapi — do not edit manually\n")
        yaml.safe_dump_all([_render(o) for o in objects], f,
                           default_flow_style=False, sort_keys=False)
    print(f"Wrote {path}", file=sys.stderr)
    return path


def emit_warnings(warnings: list[str]) -> None:
    """Print all warnings to stderr."""
    for w in warnings:
        print(f"⚠ {w}", file=sys.stderr)


def emit_failures(failures: list[tuple[str, Exception]]) -> None:
    """Print every failed object with each of its constituent errors."""
    for name, err in failures:
        print(f"✗ {name}: conversion failed", file=sys.stderr)
        for e in getattr(err, "errors", [err]):
            print(f"    {e}", file=sys.stderr)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Convert Cluster API PowerVS Machines and MachineSets to Machine API"
    )
    parser.add_argument(
        "--from-dir", required=True,
        help="Directory of rendered Cluster API YAML manifests",
    )
    parser.add_argument(
        "--output-dir", default=".",
        help="Where to write the converted manifests and capi2mapi.yaml (default: .)",
    )
    parser.add_argument(
        "--output-file", default="mapi.yml",
        help="Name of the generated manifest file (default: mapi.yml)",
    )
    parser.add_argument(
        "-n", "--namespace",
        help="Namespace for the generated Machine API objects (overrides config)",
    )
    args = parser.parse_args(argv)

    os.makedirs(args.output_dir, exist_ok=True)

    # Step 1: parse
    manifests = parse_manifests(args.from_dir)
    kinds = {k: len(v) for k, v in manifests.items()}
    print(f"Parsed manifests: {kinds}", file=sys.stderr)

    # Step 2: load config
    config_path = os.path.join(args.output_dir, "capi2mapi.yaml")
    config = load_config(config_path)
    if args.namespace:
        config["namespace"] = args.namespace

    # Step 3: convert
    objects, warnings, failures = convert(manifests, config)

    # Step 4: report
    emit_warnings(warnings)
    emit_failures(failures)

    # Step 5: write outputs
    if not objects:
        print("No objects converted — nothing to write.", file=sys.stderr)
        sys.exit(1)

    write_output(objects, args.output_dir, output_file=args.output_file)
    save_config(config_path, config)
    print(f"Wrote {config_path}", file=sys.stderr)

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
