from chemlab import create_app, db
from chemlab.models import QuestionPaper
from chemlab.papers import SAMPLE_PAPERS, validate_paper

app = create_app()

def seed():
    with app.app_context():
        for content in SAMPLE_PAPERS:
            content = validate_paper(content)
            paper = QuestionPaper.query.filter_by(slug=content['id']).first()
            if not paper:
                paper = QuestionPaper(
                    slug=content['id'],
                    title=content['title'],
                    content=content
                )
                db.session.add(paper)
                print(f"Paper {content['id']} Seeded Successfully.")

        db.session.commit()

if __name__ == '__main__':
    seed()
