import unittest

from chemlab import create_app
from chemlab.extensions import db
from chemlab.models import QuestionPaper, Submission
from chemlab.papers import SAMPLE_PAPERS, validate_paper


NEW_PAPER = {
    "title": "Enthalpy only",
    "slug": "enthalpy-only",
    "content": {
        "questions": [{"id": "Q1", "type": "energetics", "title": "Enthalpy", "marks": 10}],
    },
}


class TestApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "REACTION_SEED": 7,
        })
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        db.create_all()

        for content in SAMPLE_PAPERS:
            content = validate_paper(content)
            db.session.add(QuestionPaper(slug=content["id"], title=content["title"], content=content))
        db.session.commit()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        self.client = self.app.test_client()

    def test_simulate(self):
        vessel = {
            "label": "Conical flask",
            "contents": [
                {"chemical": "Na2S2O3", "volume": 10},
                {"chemical": "HCl", "volume": 10},
            ],
        }
        resp = self.client.post("/api/simulate", json={"vessel": vessel, "action": "add_chemical"})
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["success"])
        self.assertTrue(data["result"]["has_precipitate"])

        again = self.client.post("/api/simulate", json={"vessel": vessel}).get_json()
        self.assertEqual(again["result"]["reaction_time"], data["result"]["reaction_time"])

    def test_simulate_rejects_bad_vessel(self):
        resp = self.client.post("/api/simulate", json={"vessel": "beaker"})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.get_json()["success"])

    def test_evaluate_default_paper(self):
        resp = self.client.post("/api/evaluate", json={"action_log": [], "notes": None})
        data = resp.get_json()
        self.assertTrue(data["success"])
        self.assertEqual(data["evaluation"]["max_marks"], 40)
        self.assertEqual(data["evaluation"]["grade"], "U")
        self.assertEqual(len(data["evaluation"]["sections"]), 3)

    def test_evaluate_stored_paper(self):
        log = [
            {"action": "add_chemical", "chemical": "Na2S2O3"},
            {"action": "add_chemical", "chemical": "HCl"},
        ]
        resp = self.client.post("/api/evaluate", json={
            "slug": "rate-energetics-anions",
            "action_log": log,
            "part_answers": {"Q1a": "rate = 1000/t"},
        })
        section = resp.get_json()["evaluation"]["sections"][0]
        self.assertEqual(section["criteria"][0]["marks"], 2)
        self.assertEqual(section["criteria"][5]["marks"], 2)

    def test_evaluate_errors(self):
        resp = self.client.post("/api/evaluate", json={"slug": "no-such-paper"})
        self.assertEqual(resp.status_code, 404)

        resp = self.client.post("/api/evaluate", json={"action_log": "heat"})
        self.assertEqual(resp.status_code, 400)

    def test_save_submission(self):
        resp = self.client.post("/api/save_submission", json={
            "slug": "acid-base-halides",
            "student_name": "A. Student",
            "candidate_number": "0042",
            "date": "2024-05-14",
            "action_log": [{"action": "add_chemical", "chemical": "NaOH", "observation": "No visible change here"}],
            "part_answers": {"Q3c": "Ag+(aq) + Cl-(aq) → AgCl(s)"},
        })
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["success"])

        submission = db.session.get(Submission, data["id"])
        self.assertEqual(submission.paper.slug, "acid-base-halides")
        self.assertEqual(submission.date.year, 2024)
        self.assertEqual(submission.results["total"], data["total"])
        self.assertEqual(submission.notes, "Q3c: Ag+(aq) + Cl-(aq) → AgCl(s)")

    def test_save_submission_unknown_paper(self):
        resp = self.client.post("/api/save_submission", json={"slug": "nope", "action_log": []})
        self.assertEqual(resp.status_code, 404)

    def test_papers(self):
        data = self.client.get("/api/papers").get_json()
        slugs = [p["slug"] for p in data["papers"]]
        self.assertIn("alum-iodometric-ions", slugs)

        paper = self.client.get("/api/papers/alum-iodometric-ions").get_json()["paper"]
        self.assertEqual(paper["marks"], 40)
        self.assertEqual(self.client.get("/api/papers/missing").status_code, 404)

    def test_admin(self):
        resp = self.client.post("/admin/paper/new", json=NEW_PAPER)
        self.assertEqual(resp.status_code, 201)
        paper_id = resp.get_json()["id"]

        duplicate = self.client.post("/admin/paper/new", json=NEW_PAPER)
        self.assertEqual(duplicate.status_code, 400)

        invalid = self.client.post("/admin/paper/new", json={"title": "x", "slug": "x", "content": {"questions": []}})
        self.assertEqual(invalid.status_code, 400)

        edited = dict(NEW_PAPER, title="Enthalpy (revised)")
        resp = self.client.post(f"/admin/paper/{paper_id}/edit", json=edited)
        self.assertEqual(resp.status_code, 200)
        paper = db.session.get(QuestionPaper, paper_id)
        self.assertEqual(paper.title, "Enthalpy (revised)")
        self.assertEqual(paper.content["marks"], 10)

        self.assertEqual(self.client.post("/admin/paper/9999/edit", json=edited).status_code, 404)

        stats = self.client.get("/admin/").get_json()["stats"]
        self.assertGreaterEqual(stats["total_papers"], len(SAMPLE_PAPERS) + 1)


if __name__ == '__main__':
    unittest.main()
