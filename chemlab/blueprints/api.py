from flask import Blueprint, request, jsonify, current_app
from chemlab.evaluation import evaluate_log
from chemlab.papers import DEFAULT_PAPER, join_notes
from chemlab.reactions import simulate_reaction
from chemlab.models import QuestionPaper, Submission
from chemlab.extensions import db
import numpy as np
from datetime import datetime

bp = Blueprint('api', __name__, url_prefix='/api')


def reaction_rng():
    seed = current_app.config.get('REACTION_SEED')
    if seed is None or seed == '':
        return None
    return np.random.default_rng(int(seed))


def notes_from(data):
    if data.get('part_answers') is not None:
        return join_notes(data.get('part_answers'))
    return data.get('notes') or ""


@bp.route('/simulate', methods=['POST'])
def simulate():
    try:
        data = request.json or {}
        vessel = data.get('vessel')
        if not isinstance(vessel, dict):
            return jsonify({"success": False, "error": "vessel must be an object"}), 400
        action = data.get('action', 'add_chemical')

        result = simulate_reaction(vessel, action, rng=reaction_rng())
        return jsonify({"success": True, "action": action, "result": result})

    except Exception as e:
        current_app.logger.warning("simulate failed: %s", e)
        return jsonify({"success": False, "error": str(e)}), 400


@bp.route('/evaluate', methods=['POST'])
def evaluate():
    try:
        data = request.json or {}
        slug = data.get('slug')

        paper = data.get('paper')
        if slug:
            record = QuestionPaper.query.filter_by(slug=slug).first()
            if not record:
                return jsonify({"success": False, "error": "Paper not found"}), 404
            paper = record.as_paper()

        action_log = data.get('action_log') or []
        if not isinstance(action_log, list):
            return jsonify({"success": False, "error": "action_log must be a list"}), 400

        evaluation = evaluate_log(action_log, notes_from(data), paper or DEFAULT_PAPER)
        return jsonify({"success": True, "evaluation": evaluation})

    except Exception as e:
        current_app.logger.warning("evaluate failed: %s", e)
        return jsonify({"success": False, "error": str(e)}), 400


@bp.route('/save_submission', methods=['POST'])
def save_submission():
    try:
        data = request.json or {}
        slug = data.get('slug')

        # 1. Get Paper
        paper = QuestionPaper.query.filter_by(slug=slug).first()
        if not paper:
            return jsonify({"success": False, "error": "Paper not found"}), 404

        # 2. Candidate details
        student_name = data.get('student_name') or 'Unknown'
        candidate_number = data.get('candidate_number') or 'N/A'
        date_str = data.get('date')

        submitted = datetime.utcnow()
        if date_str:
            try:
                submitted = datetime.strptime(date_str, '%Y-%m-%d')
            except ValueError:
                current_app.logger.info("Ignoring malformed submission date %r", date_str)

        # 3. Score the attempt so the stored results match what the student saw
        action_log = data.get('action_log') or []
        if not isinstance(action_log, list):
            return jsonify({"success": False, "error": "action_log must be a list"}), 400
        notes = notes_from(data)
        evaluation = evaluate_log(action_log, notes, paper.as_paper())

        # 4. Save to DB
        submission = Submission(
            paper_id=paper.id,
            student_name=student_name,
            candidate_number=candidate_number,
            date=submitted,
            action_log=action_log,
            notes=notes,
            results=evaluation,
        )

        db.session.add(submission)
        db.session.commit()

        return jsonify({
            "success": True,
            "id": submission.id,
            "total": evaluation["total"],
            "grade": evaluation["grade"],
        })

    except Exception as e:
        db.session.rollback()
        current_app.logger.error("save_submission failed: %s", e)
        return jsonify({"success": False, "error": str(e)}), 500


@bp.route('/papers', methods=['GET'])
def list_papers():
    papers = QuestionPaper.query.order_by(QuestionPaper.id).all()
    return jsonify({
        "success": True,
        "papers": [
            {
                "slug": p.slug,
                "title": p.title,
                "marks": (p.content or {}).get("marks"),
                "questions": len((p.content or {}).get("questions") or []),
            }
            for p in papers
        ],
    })


@bp.route('/papers/<slug>', methods=['GET'])
def get_paper(slug):
    paper = QuestionPaper.query.filter_by(slug=slug).first()
    if not paper:
        return jsonify({"success": False, "error": "Paper not found"}), 404
    return jsonify({"success": True, "paper": paper.as_paper()})
