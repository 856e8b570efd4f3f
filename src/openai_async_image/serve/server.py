"""Helper to launch the preview service with uvicorn from Python (optional)."""
from __future__ import annotations
import os
import subprocess
import sys

def main() -> None:
    host = os.getenv("OPENAI_IMAGE_HOST", "127.0.0.1")
    port = os.getenv("OPENAI_IMAGE_PORT", "8000")
    log_level = os.getenv("OPENAI_IMAGE_LOG_LEVEL", "info").lower()

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "openai_async_image.serve.fastapi_app:app",
        "--host", host,
        "--port", str(port),
        "--log-level", log_level,
    ]
    subprocess.run(cmd, check=True)

if __name__ == "__main__":
    main()
