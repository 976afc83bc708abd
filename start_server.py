#!/usr/bin/env python3
"""Start script for container deployments that honours the PORT environment variable."""

import os
import subprocess
import sys
from pathlib import Path


def _port() -> int:
    raw = os.environ.get("PORT", "8000")
    try:
        return int(raw)
    except ValueError:
        print(f"Warning: Invalid PORT value '{raw}', using default 8000", file=sys.stderr)
        return 8000


def main() -> int:
    src_path = Path(__file__).resolve().parent / "src"
    if not src_path.is_dir():
        print(f"Warning: src directory not found at {src_path}", file=sys.stderr)

    pythonpath = os.environ.get("PYTHONPATH", "")
    os.environ["PYTHONPATH"] = f"{src_path}{os.pathsep}{pythonpath}" if pythonpath else str(src_path)
    sys.path.insert(0, str(src_path))

    # Fail fast if the application cannot be imported
    try:
        import dispatch.main  # noqa: F401
    except Exception as e:
        print(f"❌ Failed to import dispatch.main ({type(e).__name__}): {e}", file=sys.stderr)
        import traceback
        traceback.print_exc(file=sys.stderr)
        return 1

    port = _port()
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "dispatch.main:app",
        "--host",
        "0.0.0.0",
        "--port",
        str(port),
        "--proxy-headers",  # client IPs are needed for IP geolocation behind a proxy
        "--forwarded-allow-ips", "*",
    ]

    print(f"🚀 Starting uvicorn on port {port}...", file=sys.stderr)
    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        print("⚠️ Server interrupted by user", file=sys.stderr)
        return 0


if __name__ == "__main__":
    sys.exit(main())
