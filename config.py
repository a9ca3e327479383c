import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DB_PATH = os.path.join(BASE_DIR, "db", "flashcards.db")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or f"sqlite:///{DB_PATH}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # "subject": a study session reschedules every due card of its subject.
    # "studied": only the due cards listed in the request's card_ids.
    SESSION_SCHEDULING_SCOPE = os.getenv("SESSION_SCHEDULING_SCOPE", "subject")

    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 100


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = "WARNING"
    SESSION_SCHEDULING_SCOPE = "subject"
