import logging
import os

from flask import Flask, jsonify

from config import Config
from extensions import db, bcrypt, login_manager
from models.user import User
from routes import register_blueprints
from scheduling import SchedulingError, SystemClock

logger = logging.getLogger(__name__)

SCHEDULING_SCOPES = ("subject", "studied")


def create_app(config_object=Config, clock=None):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"),
                        format="%(asctime)s %(levelname)s %(name)s : %(message)s")

    if app.config["SESSION_SCHEDULING_SCOPE"] not in SCHEDULING_SCOPES:
        raise ValueError(f"SESSION_SCHEDULING_SCOPE must be one of {SCHEDULING_SCOPES}")

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)

    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)

    app.extensions["clock"] = clock or SystemClock()

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401

    @app.errorhandler(SchedulingError)
    def scheduling_error(err):
        logger.warning("Rejected scheduling input: %s", err)
        return jsonify({"error": str(err)}), 400

    @app.after_request
    def add_no_cache_headers(response):
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    register_blueprints(app)

    with app.app_context():
        db.create_all()

    return app


if __name__ == '__main__':
    create_app().run(debug=True, host='0.0.0.0', port=5002)
