from dataclasses import asdict
from typing import Optional

from flask import Flask

from .config.settings import BaseConfig, load_settings
from .controllers.api_controller import SERVICES_KEY, api_blueprint
from .services.container import ResearchServices, build_services


def create_app(
    config_name: str = "development",
    *,
    settings: Optional[BaseConfig] = None,
    services: Optional[ResearchServices] = None,
) -> Flask:
    app = Flask(__name__)
    settings = settings or load_settings(config_name)
    app.config.from_mapping(asdict(settings))

    app.extensions[SERVICES_KEY] = services or build_services(settings)
    app.register_blueprint(api_blueprint, url_prefix="/api")

    return app
