from .auth import auth_bp
from .deck import decks_bp
from .flashcard import flashcards_bp
from .health import health_bp
from .study_session import study_sessions_bp
from .subject import subjects_bp


def register_blueprints(app):
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(subjects_bp)
    app.register_blueprint(decks_bp)
    app.register_blueprint(flashcards_bp)
    app.register_blueprint(study_sessions_bp)
