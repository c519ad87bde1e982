import atexit
import logging

from flask import Flask

from greenhouse import db
from greenhouse.config import config
from greenhouse.plant import PlantRepository, PlantStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    logging.basicConfig(level=level or config.log_level, format=LOG_FORMAT)


def create_plant_store() -> PlantStore:
    """Open the shared connection pool and prepare the plant collection."""
    db.open_pool()

    repository = PlantRepository(config.collection_name)
    # Best-effort: not every termination path runs atexit hooks
    atexit.register(repository.close)
    repository.ensure_collection()
    return repository


def create_app(store: PlantStore = None) -> Flask:
    """Application factory."""
    configure_logging()
    app = Flask(__name__)

    # Configure storage
    if store is None:
        store = create_plant_store()
    app.extensions["plant_store"] = store

    # Register blueprints
    from greenhouse.api import plants_bp

    app.register_blueprint(plants_bp, url_prefix="/plants")

    @app.route("/health")
    def health():
        return {"status": "ok"}

    logger.info("Using %s (%s)", type(store).__name__, config.environment)
    return app


def main():
    """Run the development server."""
    app = create_app()
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == "__main__":
    main()
