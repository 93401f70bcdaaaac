"""
Command line entry point: ``python -m docstore -c application.json``.
"""
import argparse
import sys

import uvicorn

from docstore.config import load_settings
from docstore.errors import ConfigError
from docstore.main import create_app


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="docstore", description="docstore API server")
    parser.add_argument("--hostname", default="localhost", help="the server hostname")
    parser.add_argument("--port", type=int, default=3000, help="network port to bind")
    parser.add_argument("-c", "--config", default="application.json", help="path to the JSON configuration")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"could not start docstore: {e}", file=sys.stderr)
        return 1
    app = create_app(settings)
    uvicorn.run(app, host=args.hostname, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
