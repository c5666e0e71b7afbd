# run.py
# Launches the hint service. Install the project first (pip install -e .)
# so the 'starbattle_hints' package is importable.

import argparse
import logging

from starbattle_hints.app import app
from starbattle_hints.constants import DEFAULT_HOST, DEFAULT_PORT


def main():
    parser = argparse.ArgumentParser(description="Serve Star Battle hints over HTTP.")
    parser.add_argument('--host', default=DEFAULT_HOST, help="Interface to bind.")
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help="Port to listen on.")
    parser.add_argument('--debug', action='store_true', help="Enable Flask auto-reloading.")
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help="Logging verbosity.")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s - %(levelname)s - %(message)s')
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
