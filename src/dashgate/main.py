"""Application entry point for the dashgate server."""

from dashgate.app import App
from dashgate.config import Config
from dashgate.logging import setup_logging
from dashgate.web.runner import run_server


def main() -> None:
    config = Config()  # raises if the session secret is missing outside debug
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
