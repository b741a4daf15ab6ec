"""
JSX PDF entrypoint - runs uvicorn server.
"""

import uvicorn

from .api.app import build_app
from .config import get_config


def main() -> None:
    """Run the JSX PDF server."""
    config = get_config()
    app = build_app(config)

    print(f"Starting JSX PDF on http://{config.host}:{config.port}")
    print(f"Health check: http://{config.host}:{config.port}/health")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
