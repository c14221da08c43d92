from flask import Blueprint, request, jsonify, current_app
from chemlab.models import QuestionPaper, Submission
from chemlab.papers import validate_paper
from chemlab.extensions import db

bp = Blueprint('admin', __name__, url_prefix='/admin')


def paper_fields(data):
    title = data.get('title')
    slug = data.get('slug')
    if not title or not slug:
        raise ValueError("title and slug are required")
    content = validate_paper(data.get('content'))
    content.setdefault('id', slug)
    content.setdefault('title', title)
    return title, slug, content


@bp.route('/')
def dashboard():
    papers = QuestionPaper.query.all()
    # Simple stats
    stats = {
        'total_papers': len(papers),
        'total_submissions': Submission.query.count(),
    }
    return jsonify({
        "success": True,
        "stats": stats,
        "papers": [
            {"id": p.id, "slug": p.slug, "title": p.title, "submissions": len(p.submissions)}
            for p in papers
        ],
    })


@bp.route('/paper/new', methods=['POST'])
def new_paper():
    try:
        title, slug, content = paper_fields(request.json or {})
        if QuestionPaper.query.filter_by(slug=slug).first():
            raise ValueError(f"Paper slug already exists: {slug}")

        paper = QuestionPaper(title=title, slug=slug, content=content)
        db.session.add(paper)
        db.session.commit()

        current_app.logger.info("Created paper %s", slug)
        return jsonify({"success": True, "id": paper.id}), 201
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400


@bp.route('/paper/<int:id>/edit', methods=['POST'])
def edit_paper(id):
    paper = db.get_or_404(QuestionPaper, id)
    try:
        title, slug, content = paper_fields(request.json or {})
        clash = QuestionPaper.query.filter_by(slug=slug).first()
        if clash and clash.id != paper.id:
            raise ValueError(f"Paper slug already exists: {slug}")

        paper.title = title
        paper.slug = slug
        paper.content = content
        db.session.commit()

        current_app.logger.info("Updated paper %s", slug)
        return jsonify({"success": True, "id": paper.id})
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
