"""Entry point for the ChatKit relay and its chat page.

RUN_MODE selects what this process serves:
    - integrated: relay routes and chat page on one server (default)
    - separate: relay and chat page as two child processes
    - relay: relay routes only
    - ui: chat page only, talking to the relay at API_BASE_URL

Environment variables are loaded from .env file.
"""

import logging
import os
import subprocess
import sys
import time

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

PAGE_TITLE = "ChatKit Chat"


def _host() -> str:
    return os.getenv("HOST", "0.0.0.0")


def _relay_port() -> int:
    return int(os.getenv("PORT", "8000"))


def _ui_port() -> int:
    return int(os.getenv("UI_PORT", "8080"))


def _storage_secret() -> str:
    return os.getenv("NICEGUI_STORAGE_SECRET", "chatkit-relay-secret")


def run_relay() -> None:
    """Serve the relay routes without the chat page."""
    import uvicorn

    logger.info(f"Relay listening on port {_relay_port()}")
    uvicorn.run(
        "src.api.app:app",
        host=_host(),
        port=_relay_port(),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_ui() -> None:
    """Serve the chat page on its own port."""
    from nicegui import ui

    from src.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    logger.info(f"Chat page on port {_ui_port()}, relay at {os.getenv('API_BASE_URL')}")
    ui.run(
        title=PAGE_TITLE,
        host=_host(),
        port=_ui_port(),
        reload=False,
        show=False,
        storage_secret=_storage_secret(),
    )


def run_integrated() -> None:
    """Serve the relay with the chat page mounted at ``/``.

    The page calls the relay through its own origin, so API_BASE_URL
    defaults to this server.
    """
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    os.environ.setdefault("API_BASE_URL", f"http://localhost:{_relay_port()}")
    app = create_app()

    # The storage secret enables app.storage.user, which holds the threads
    ui.run_with(app, title=PAGE_TITLE, favicon="💬", storage_secret=_storage_secret())

    logger.info(f"Relay and chat page on http://localhost:{_relay_port()}/")
    uvicorn.run(
        app,
        host=_host(),
        port=_relay_port(),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def _spawn(mode: str, **env: str) -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "src.main"],
        env={**os.environ, "RUN_MODE": mode, **env},
    )


def run_separate() -> None:
    """Run the relay and the chat page as child processes.

    Exits when either child exits; the other is terminated.
    """
    relay_url = f"http://localhost:{_relay_port()}"
    children = [
        _spawn("relay"),
        _spawn("ui", API_BASE_URL=os.getenv("API_BASE_URL", relay_url)),
    ]
    logger.info(f"Relay on {relay_url}, chat page on http://localhost:{_ui_port()}")

    try:
        while all(child.poll() is None for child in children):
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        for child in children:
            if child.poll() is None:
                child.terminate()
        for child in children:
            child.wait()
            logger.info(f"Child {child.args} exited with {child.returncode}")


RUNNERS = {
    "integrated": run_integrated,
    "separate": run_separate,
    "relay": run_relay,
    "ui": run_ui,
}


def main() -> None:
    mode = os.getenv("RUN_MODE", "integrated").lower()
    runner = RUNNERS.get(mode)
    if runner is None:
        logger.error(f"Unknown RUN_MODE {mode!r}; expected one of {', '.join(RUNNERS)}")
        sys.exit(2)

    logger.info(f"Starting ChatKit relay in {mode} mode")
    runner()


if __name__ == "__main__":
    main()
