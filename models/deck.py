from extensions import db
from models import utcnow


class Deck(db.Model):
    """A named group of flashcards inside one subject."""
    __tablename__ = "deck"
    __table_args__ = (db.UniqueConstraint("subject_id", "name", name="uq_deck_subject_name"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subject.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), default="")

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
