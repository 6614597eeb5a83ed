"""
API tests for job postings and recruiter application review.
"""
from ats_portal.db.models.job_posting import JobPosting
from ats_portal.db.models.submission import Submission
from tests.conftest import auth_headers, make_user


JOB_PAYLOAD = {
    "title": "Senior Python Developer",
    "description": "Own our FastAPI services.",
    "location": "Remote - EU",
    "experience_level": "senior",
    "employment_type": "full-time",
    "skills": ["Python", "FastAPI"],
    "requirements": ["5+ years Python"],
}


def add_submission(db, job, score, email="candidate@example.com", user=None):
    submission = Submission(
        job_id=job.id,
        user_id=user.id if user else None,
        applicant_name="Candidate",
        applicant_email=email,
        ats_score=score,
        parsed_resume_data={"name": "Candidate"},
        analysis={"ats_score": score},
        raw_resume_text="resume",
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)
    return submission


def test_create_job_generates_unique_slugs(client, recruiter):
    first = client.post("/jobs", json=JOB_PAYLOAD, headers=auth_headers(recruiter))
    second = client.post("/jobs", json=JOB_PAYLOAD, headers=auth_headers(recruiter))

    assert first.status_code == 201
    assert first.json()["slug"] == "senior-python-developer"
    assert first.json()["created_by"] == recruiter.id
    assert second.json()["slug"] == "senior-python-developer-1"


def test_create_job_requires_recruiter(client, applicant):
    assert client.post("/jobs", json=JOB_PAYLOAD).status_code == 401
    assert client.post("/jobs", json=JOB_PAYLOAD, headers=auth_headers(applicant)).status_code == 403


def test_create_job_validates_fields(client, recruiter):
    payload = dict(JOB_PAYLOAD, experience_level="wizard")
    assert client.post("/jobs", json=payload, headers=auth_headers(recruiter)).status_code == 422


def test_public_listing_filters(client, db, recruiter, job):
    db.add_all([
        JobPosting(created_by=recruiter.id, title="Hidden", description="x", slug="hidden", is_public=False),
        JobPosting(created_by=recruiter.id, title="Draft", description="x", slug="draft", status="draft"),
        JobPosting(created_by=recruiter.id, title="Designer", description="Figma", slug="designer",
                   experience_level="entry", location="Berlin"),
    ])
    db.commit()

    listed = client.get("/jobs").json()
    assert {j["slug"] for j in listed["jobs"]} == {"backend-engineer", "designer"}
    assert listed["total"] == 2

    assert [j["slug"] for j in client.get("/jobs", params={"search": "python"}).json()["jobs"]] == ["backend-engineer"]
    assert [j["slug"] for j in client.get("/jobs", params={"experience_level": "entry"}).json()["jobs"]] == ["designer"]
    assert [j["slug"] for j in client.get("/jobs", params={"location": "berl"}).json()["jobs"]] == ["designer"]


def test_get_job_by_slug(client, db, recruiter, job):
    response = client.get("/jobs/backend-engineer")
    assert response.status_code == 200
    assert response.json()["skills"] == ["Python", "Kubernetes"]

    job.status = "draft"
    db.commit()
    assert client.get("/jobs/backend-engineer").status_code == 404
    assert client.get("/jobs/nope").status_code == 404


def test_list_my_jobs(client, db, recruiter, job):
    other = make_user(db, "other-hr@example.com", role="hr")
    db.add(JobPosting(created_by=other.id, title="Theirs", description="x", slug="theirs"))
    db.add(JobPosting(created_by=recruiter.id, title="Mine", description="x", slug="mine-draft", status="draft"))
    db.commit()

    response = client.get("/jobs/mine", headers=auth_headers(recruiter))

    assert response.status_code == 200
    assert {j["slug"] for j in response.json()["jobs"]} == {"backend-engineer", "mine-draft"}
    drafts = client.get("/jobs/mine", params={"status": "draft"}, headers=auth_headers(recruiter)).json()
    assert [j["slug"] for j in drafts["jobs"]] == ["mine-draft"]


def test_update_job_reslugs_on_title_change(client, recruiter, job):
    response = client.put(
        "/jobs/backend-engineer",
        json={"title": "Staff Backend Engineer", "status": "paused"},
        headers=auth_headers(recruiter),
    )

    assert response.status_code == 200
    assert response.json()["slug"] == "staff-backend-engineer"
    assert response.json()["status"] == "paused"
    assert response.json()["description"] == "Build APIs in Python."


def test_update_job_by_other_recruiter(client, db, job):
    other = make_user(db, "other-hr@example.com", role="hr")
    response = client.put("/jobs/backend-engineer", json={"title": "Hijacked"}, headers=auth_headers(other))
    assert response.status_code == 404


def test_generate_job_draft(client, recruiter):
    response = client.post(
        "/jobs/generate",
        json={"messages": [{"role": "user", "content": "Hiring a QA intern in Pune."}]},
        headers=auth_headers(recruiter),
    )

    assert response.status_code == 200
    draft = response.json()
    assert draft["description"] == "Hiring a QA intern in Pune."
    assert draft["experience_level"] == "mid"
    assert draft["salary_currency"] == "USD"


def test_generate_job_draft_needs_content(client, recruiter):
    response = client.post(
        "/jobs/generate",
        json={"messages": [{"role": "user", "content": "   "}]},
        headers=auth_headers(recruiter),
    )
    assert response.status_code == 400


def test_delete_job_removes_submissions_and_rescores(client, db, recruiter, applicant, job):
    add_submission(db, job, 70, email=applicant.email, user=applicant)
    applicant.latest_score = 70
    db.commit()

    response = client.delete("/jobs/backend-engineer", headers=auth_headers(recruiter))

    assert response.status_code == 204
    assert db.query(Submission).count() == 0
    db.refresh(applicant)
    assert applicant.latest_score == 0


def test_delete_job_rescores_applicant_matched_by_email(client, db, recruiter, applicant, job):
    # Submitted without logging in, under the applicant's email
    add_submission(db, job, 70, email="ADA@example.com")
    applicant.latest_score = 70
    applicant.average_score = 70
    db.commit()

    response = client.delete("/jobs/backend-engineer", headers=auth_headers(recruiter))

    assert response.status_code == 204
    db.refresh(applicant)
    assert applicant.latest_score == 0
    assert applicant.average_score == 0


def test_list_applications_sorted_by_score(client, db, recruiter, job):
    low = add_submission(db, job, 40)
    high = add_submission(db, job, 85)

    response = client.get(
        "/jobs/backend-engineer/applications",
        params={"sort": "score"},
        headers=auth_headers(recruiter),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [s["id"] for s in body["submissions"]] == [high.id, low.id]
    assert body["submissions"][0]["analysis"]["ats_score"] == 85
    assert body["submissions"][0]["analysis"]["skills_matched"] == []


def test_update_application_status(client, db, recruiter, job):
    submission = add_submission(db, job, 60)
    url = f"/jobs/backend-engineer/applications/{submission.id}"

    response = client.put(url, json={"status": "shortlisted", "review_notes": "Strong"}, headers=auth_headers(recruiter))

    assert response.status_code == 200
    assert response.json()["status"] == "shortlisted"
    db.refresh(submission)
    assert submission.reviewed_by == recruiter.id
    assert submission.review_notes == "Strong"

    assert client.put(url, json={"status": "ghosted"}, headers=auth_headers(recruiter)).status_code == 422
    missing = client.put(
        "/jobs/backend-engineer/applications/9999", json={"status": "rejected"}, headers=auth_headers(recruiter),
    )
    assert missing.status_code == 404
