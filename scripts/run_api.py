# Use postponed evaluation of annotations so type hints don't require importing types at runtime.
from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

# We import `uvicorn` to run the FastAPI application as an ASGI server.
import uvicorn

# We use a factory function so the FastAPI app is created from a typed config (no global state).
from gbakaguides.api.app import create_app
from gbakaguides.config.loader import ConfigError, load_config


logger = logging.getLogger("gbakaguides.run_api")


# Single entrypoint: config IO, app creation and server startup all happen here.
def main() -> int:
    try:
        config = load_config()
    except ConfigError as exc:
        # Operator error (e.g. missing MAPBOX_TOKEN): refuse to start.
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(name)s - %(message)s")
        logger.error("Cannot start: %s", exc)
        return 1

    app = create_app(config)
    uvicorn.run(app, host=config.web.host, port=config.web.port)
    return 0


if __name__ == "__main__":
    # This guard prevents accidental side effects when the module is imported by tests or other scripts.
    sys.exit(main())
