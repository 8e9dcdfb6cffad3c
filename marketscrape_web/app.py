"""Flask app exposing the product scraper and shipping fee lookup.

Run locally with ``python -m marketscrape_web.app``.
"""

from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

# Load environment variables from .env file before config is read
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from marketscrape.logging_config import setup_logging  # noqa: E402
from marketscrape_web.api import api  # noqa: E402
from marketscrape_web.config import FLASK_DEBUG, FLASK_HOST, FLASK_PORT, LOG_TO_FILE  # noqa: E402


def create_app() -> Flask:
    """Build the Flask app with the API blueprint registered."""
    app = Flask(__name__)
    app.json.sort_keys = False
    app.register_blueprint(api)
    return app


app = create_app()


if __name__ == "__main__":
    setup_logging(log_to_file=LOG_TO_FILE)
    # Each request launches its own browser, so threads never share one
    app.run(host=FLASK_HOST, port=FLASK_PORT, debug=FLASK_DEBUG, threaded=True)
