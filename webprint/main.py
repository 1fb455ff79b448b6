"""
WebPrint entrypoint - runs uvicorn server.
"""

import uvicorn

from webprint.app import build_app
from webprint.config import get_settings


def main() -> None:
    """Run the WebPrint server."""
    settings = get_settings()
    app = build_app(settings)

    print(f"Starting WebPrint on http://{settings.host}:{settings.port}")
    print(f"PDF API: http://{settings.host}:{settings.port}{settings.render_path}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
