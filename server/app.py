import atexit
import logging
import os

from flask_cors import CORS

from . import create_app
from .controllers.api_controller import SERVICES_KEY

app = create_app(os.getenv("APP_ENV", "development"))

logging.basicConfig(
    level=app.config.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Enable CORS for API routes
CORS(app, resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

# Wait for in-flight streaming runs on shutdown
atexit.register(app.extensions[SERVICES_KEY].workers.join, app.config.get("STREAM_SHUTDOWN_TIMEOUT", 30))


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=app.config.get("DEBUG", False), threaded=True)
