# api/cli.py
import argparse

import uvicorn

from common.settings import load_settings

from .main import create_app


def main():
    p = argparse.ArgumentParser(description="Serve the transfer indexer API")
    p.add_argument("--config", default="config.yaml", help="Path to config.yaml")
    p.add_argument("--host", default=None, help="Bind host (defaults to api.host)")
    p.add_argument("--port", type=int, default=None, help="Bind port (defaults to api.port)")
    args = p.parse_args()

    settings = load_settings(args.config)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
