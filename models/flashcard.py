from extensions import db
from models import utcnow
from scheduling import SchedulableCard
from scheduling.clock import to_utc

DIFFICULTIES = ("easy", "medium", "hard")


class Flashcard(db.Model):
    __tablename__ = "flashcard"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    subject_id = db.Column(db.Integer, db.ForeignKey("subject.id"), nullable=False, index=True)
    deck_id = db.Column(db.Integer, db.ForeignKey("deck.id"), index=True)
    question = db.Column(db.Text, nullable=False)
    answer = db.Column(db.Text, nullable=False)
    explanation = db.Column(db.Text)
    difficulty = db.Column(db.String(16), nullable=False, default="medium")
    tags = db.Column(db.JSON, default=list)

    # scheduling fields, written only from scheduler directives; naive UTC
    last_reviewed = db.Column(db.DateTime)
    next_review = db.Column(db.DateTime, index=True)
    review_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_schedulable(self):
        return SchedulableCard(
            id=self.id,
            last_reviewed=to_utc(self.last_reviewed),
            next_review=to_utc(self.next_review),
            review_count=self.review_count or 0,
        )


class ReviewLog(db.Model):
    __tablename__ = "review_log"
    id = db.Column(db.Integer, primary_key=True)
    card_id = db.Column(db.Integer, db.ForeignKey("flashcard.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    grade = db.Column(db.String(16), nullable=False)  # again | hard | good | easy
    reviewed_at = db.Column(db.DateTime, default=utcnow)
    next_review_after = db.Column(db.DateTime)
