from __future__ import annotations

import argparse
import json
import os
import sys
from datetime import datetime

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print the role-specific dashboard for one user as JSON."
    )
    parser.add_argument("email", help="Email of the user whose dashboard to build.")
    parser.add_argument(
        "--as-of",
        default=None,
        help="Evaluate month/week windows as of this ISO timestamp (default: now).",
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(PROJECT_ROOT, ".env"),
        help="Path to .env file.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    load_env_file(args.env_file)

    from src.api.dependencies import get_dashboard_service
    from src.core.errors import AppError
    from src.core.logging import configure_logging

    configure_logging(os.environ.get("LOG_LEVEL"))
    now = datetime.fromisoformat(args.as_of) if args.as_of else None
    try:
        view = get_dashboard_service().get_dashboard(args.email, now=now)
    except AppError as exc:
        print(json.dumps({"error": {"code": exc.code, "message": exc.message}}, indent=2))
        return 1
    print(json.dumps(view.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
