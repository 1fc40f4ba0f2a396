#!/usr/bin/env python3
"""CLI for running single Beanstalk resource operations."""

from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Any

# Support running as a standalone script from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from beanstalk_provider import (
    BeanstalkError,
    ConfigError,
    Provider,
)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _attributes(args: argparse.Namespace, option: str = "attrs") -> dict[str, Any]:
    attributes: dict[str, Any] = {}
    attrs_file = getattr(args, f"{option}_file", None)
    if attrs_file:
        attributes.update(json.loads(Path(attrs_file).read_text(encoding="utf-8")))
    for item in getattr(args, f"{option}_set", None) or []:
        if "=" not in item:
            raise ValueError(f"Expected key=value, got '{item}'")
        key, value = item.split("=", 1)
        attributes[key.strip()] = _parse_value(value)
    if getattr(args, "id", None):
        attributes["id"] = args.id
    return attributes


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_to_jsonable(v) for v in value), key=json.dumps)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _add_attribute_args(parser: argparse.ArgumentParser, prefix: str = "") -> None:
    dest = f"{prefix.replace('-', '_')}attrs"
    flag = f"--{prefix}attrs" if prefix else "--attrs"
    parser.add_argument(
        f"{flag}-file",
        dest=f"{dest}_file",
        default=None,
        help="JSON file with resource attributes",
    )
    parser.add_argument(
        f"--{prefix}set" if prefix else "--set",
        action="append",
        dest=f"{dest}_set",
        default=[],
        help="Attribute as key=value; value parsed as JSON when possible (repeatable)",
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Beanstalk resource CLI")
    parser.add_argument("--config", default=None, help="Path to beanstalk.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("types", help="List supported resource types")

    for command in ("create", "read", "update", "delete"):
        sub = subparsers.add_parser(command, help=f"{command.capitalize()} a resource")
        sub.add_argument("type", help="Resource type, e.g. beanstalk_repository")
        sub.add_argument("--id", default=None, help="Remote resource id")
        _add_attribute_args(sub)
        if command == "update":
            _add_attribute_args(sub, prefix="prior-")

    return parser


def main(argv: list[str] | None = None, provider: Provider | None = None) -> int:
    load_dotenv()
    args = _parser().parse_args(argv)

    try:
        if provider is None:
            provider = Provider.from_config(args.config)

        if args.command == "types":
            for name in provider.resource_types():
                print(name)
            return 0

        attributes = _attributes(args)

        if args.command == "create":
            state = provider.create(args.type, attributes)
        elif args.command == "read":
            state = provider.read(args.type, attributes)
        elif args.command == "update":
            prior = _attributes(args, "prior_attrs") if (
                args.prior_attrs_file or args.prior_attrs_set
            ) else None
            state = provider.update(args.type, attributes, prior)
        elif args.command == "delete":
            state = provider.delete(args.type, attributes)
        else:
            return 1

        print(json.dumps(_to_jsonable(state), indent=2))
        return 0
    except ConfigError as err:
        print(f"invalid:{err}", file=sys.stderr)
        return 2
    except (BeanstalkError, ValueError, KeyError) as err:
        print(f"error:{err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
