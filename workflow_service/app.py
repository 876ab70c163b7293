"""
Workflow Service — Flask application
Order status workflow with dispute locking, and buyer/vendor conversations.
"""

import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flasgger import Swagger

from workflow_service.config import DEFAULTS, engine_options, load_config
from workflow_service.errors import WorkflowError
from workflow_service.extensions import db, jwt
from workflow_service import models  # noqa: F401  (register tables)

logger = logging.getLogger(__name__)


def create_app(config=None):
    """
    config: explicit mapping of Flask config keys. When omitted the
    environment (and .env) is read through load_config().
    """
    app = Flask(__name__)

    if config is None:
        settings = load_config()
    else:
        settings = {**DEFAULTS, **config}
    app.config.from_mapping(settings)
    app.config.setdefault(
        "SQLALCHEMY_ENGINE_OPTIONS",
        engine_options(app.config["SQLALCHEMY_DATABASE_URI"], app.config["STORE_TIMEOUT_SECONDS"]),
    )

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)

    swagger_config = {
        "headers": [],
        "specs": [
            {
                "endpoint": 'apispec_1',
                "route": '/apispec_1.json',
                "rule_filter": lambda rule: True,  # all in
                "model_filter": lambda tag: True,  # all in
            }
        ],
        "static_url_path": "/flasgger_static",
        "swagger_ui": True,
        "specs_route": "/apidocs/"
    }
    Swagger(app, config=swagger_config)

    @app.errorhandler(WorkflowError)
    def handle_workflow_error(error):
        return jsonify(error.to_dict()), error.status_code

    # Register Blueprints
    from workflow_service.routes.orders import orders_bp
    app.register_blueprint(orders_bp)

    from workflow_service.routes.disputes import disputes_bp
    app.register_blueprint(disputes_bp)

    from workflow_service.routes.conversations import conversations_bp
    app.register_blueprint(conversations_bp)

    from workflow_service.routes.messages import messages_bp
    app.register_blueprint(messages_bp)

    # --- Health check ---------------------------------------------------
    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return jsonify({
                "service": "workflow-service",
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return jsonify({"service": "workflow-service", "status": "unhealthy", "error": str(e)}), 503

    if app.config["AUTO_CREATE_TABLES"]:
        with app.app_context():
            db.create_all()

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=app.config['PORT'])
