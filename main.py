"""scalecost: run locally with: python main.py or uvicorn main:app --reload."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env before the app reads SCALECOST_* settings at import time
load_dotenv(Path(__file__).resolve().parent / ".env")

from scalecost.api import app, mount_static  # noqa: E402

logging.basicConfig(
    level=os.environ.get("SCALECOST_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# Optional frontend served from project_root/static
STATIC_DIR = Path(__file__).resolve().parent / "static"
mount_static(app, STATIC_DIR)

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
