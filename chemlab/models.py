from datetime import datetime
from .extensions import db
from sqlalchemy.types import JSON

class QuestionPaper(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(64), unique=True, nullable=False)
    title = db.Column(db.String(128), nullable=False)
    # Full paper: marks, FA map, unknown FAs, ordered questions with parts
    content = db.Column(JSON, nullable=False)

    def as_paper(self):
        paper = dict(self.content or {})
        paper.setdefault("id", self.slug)
        paper.setdefault("title", self.title)
        return paper

    def __repr__(self):
        return f'<QuestionPaper {self.title}>'

class Submission(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    paper_id = db.Column(db.Integer, db.ForeignKey('question_paper.id'), nullable=False)
    student_name = db.Column(db.String(64), nullable=False)
    candidate_number = db.Column(db.String(32), nullable=False)
    date = db.Column(db.DateTime, default=datetime.utcnow)

    # The accumulated log and flattened answer notes, with the evaluation they produced
    action_log = db.Column(JSON, nullable=False)
    notes = db.Column(db.Text, nullable=False, default="")
    results = db.Column(JSON, nullable=False)

    paper = db.relationship('QuestionPaper', backref=db.backref('submissions', lazy=True))

    def __repr__(self):
        return f'<Submission {self.student_name} - {self.paper.slug}>'
