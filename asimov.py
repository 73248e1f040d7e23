"""Asimov - Entry Point.

With arguments, runs one command-line mode (see ``ui.cli``); without, serves the HTTP API.
"""

import sys

from config import load_config
from utils.crash import configure as configure_crash, install_crash_handler

config = load_config()
configure_crash(config.logging.crash_file)
install_crash_handler()

if __name__ == "__main__":
    if len(sys.argv) > 1:
        from ui.cli import main
        sys.exit(main(sys.argv[1:], config=config))

    import uvicorn
    from ui.app import create_app
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)
