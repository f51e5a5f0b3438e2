from resumatch.db.documents import get_document_store
from resumatch.errors import UpstreamError


def test_match_endpoint_scores_each_job_once(client, make_profile, make_job, upload_resume, fake_llm) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    seeker = make_profile("seek-1")
    jobs = [make_job(recruiter), make_job(recruiter, title="Data Analyst")]
    resume = upload_resume(seeker)
    job_ids = [job["id"] for job in jobs]

    first = client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": job_ids}, headers=seeker)
    second = client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": job_ids}, headers=seeker)

    assert first.status_code == 200
    assert second.json()["match_count"] == 2
    for job_id in job_ids:
        assert get_document_store().count_match_results(resume["id"], job_id) == 1

    listed = client.get(f"/api/matches?resumeId={resume['id']}", headers=seeker).json()
    assert listed["match_count"] == 2


def test_match_without_analysis_is_not_found(client, make_profile, make_job, fake_llm) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    job = make_job(recruiter)

    resp = client.post("/api/ai/match", json={"resumeId": "no-such-resume", "jobIds": [job["id"]]}, headers=recruiter)

    assert resp.status_code == 404
    assert resp.json() == {"error": "Resume analysis not found"}
    assert fake_llm.match_calls == []


def test_match_request_requires_both_fields(client, make_profile) -> None:
    seeker = make_profile("seek-1")
    assert client.post("/api/ai/match", json={"resumeId": "r1"}, headers=seeker).status_code == 400
    assert client.post("/api/ai/match", json={"jobIds": ["j1"]}, headers=seeker).status_code == 400


def test_match_with_unknown_jobs_is_not_found(client, make_profile, upload_resume) -> None:
    seeker = make_profile("seek-1")
    resume = upload_resume(seeker)

    resp = client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": ["ghost"]}, headers=seeker)

    assert resp.status_code == 404
    assert resp.json() == {"error": "No jobs found with the provided IDs"}


def test_ai_failure_is_bad_gateway_and_writes_nothing(client, make_profile, make_job, upload_resume, fake_llm) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    seeker = make_profile("seek-1")
    job = make_job(recruiter)
    resume = upload_resume(seeker)
    fake_llm.error = UpstreamError("Gemini API error: 500 Internal Server Error", upstream_status=500)

    resp = client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": [job["id"]]}, headers=seeker)

    assert resp.status_code == 502
    assert get_document_store().list_match_results(resume["id"]) == []


def test_seeker_cannot_match_someone_elses_resume(client, make_profile, make_job, upload_resume) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    alice = make_profile("alice")
    bob = make_profile("bob")
    job = make_job(recruiter)
    resume = upload_resume(alice)

    resp = client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": [job["id"]]}, headers=bob)
    assert resp.status_code == 403


def test_compute_matches_defaults_to_every_job(client, make_profile, make_job, upload_resume, fake_llm) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    seeker = make_profile("seek-1")
    make_job(recruiter)
    make_job(recruiter, title="Data Analyst")
    resume = upload_resume(seeker)

    resp = client.post("/api/matches", json={"resumeId": resume["id"]}, headers=seeker)

    assert resp.json()["match_count"] == 2
    assert len(fake_llm.match_calls) == 1


def test_list_matches_requires_resume_id(client, make_profile) -> None:
    seeker = make_profile("seek-1")
    resp = client.get("/api/matches", headers=seeker)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Resume ID is required"}


def test_deleting_a_job_drops_its_match_results(client, make_profile, make_job, upload_resume) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    seeker = make_profile("seek-1")
    job = make_job(recruiter)
    resume = upload_resume(seeker)
    client.post("/api/ai/match", json={"resumeId": resume["id"], "jobIds": [job["id"]]}, headers=seeker)

    client.delete(f"/api/jobs/{job['id']}", headers=recruiter)

    assert get_document_store().list_match_results(resume["id"]) == []


def test_improvements_for_a_job(client, make_profile, make_job, upload_resume) -> None:
    recruiter = make_profile("rec-1", "recruiter")
    seeker = make_profile("seek-1")
    job = make_job(recruiter)
    resume = upload_resume(seeker)

    resp = client.post("/api/ai/improvements", json={"resumeId": resume["id"], "jobId": job["id"]}, headers=seeker)

    assert resp.status_code == 200
    assert resp.json()["skill_suggestions"] == ["Mention SQL"]
    assert "skillSuggestions" not in resp.json()
    missing = client.post("/api/ai/improvements", json={"resumeId": resume["id"], "jobId": "ghost"}, headers=seeker)
    assert missing.status_code == 404
