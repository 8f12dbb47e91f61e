import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from src.api.dependencies.auth import get_current_user_id
from src.api.dependencies.services import get_mock_interview_service, get_practice_ai
from src.api.dependencies.session import get_async_session
from src.main import initialize_backend_application
from src.repository.table import Base
from src.services.mock_interview import MockInterviewService
from src.services.registry import LiveSessionRegistry
from src.utilities.exceptions.domain import AIServiceError


@pytest.fixture
def user_id():
    return f"api-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def client(tmp_path, user_id):
    url = f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"

    async def _session():
        # TestClient runs every request on its own event loop; keep the engine per request
        engine = create_async_engine(url)
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        session = async_sessionmaker(bind=engine, expire_on_commit=False)()
        try:
            yield session
        finally:
            await session.close()
            await engine.dispose()

    app = initialize_backend_application()
    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_current_user_id] = lambda: user_id
    # No context manager: startup would connect to PostgreSQL
    return TestClient(app)


def test_health_needs_no_auth():
    app = initialize_backend_application()
    response = TestClient(app).get("/api/health")
    assert response.status_code == 200
    assert response.json()["service"] == "prephub-backend"


def test_routes_require_a_bearer_token():
    app = initialize_backend_application()
    response = TestClient(app).get("/api/history")
    assert response.status_code in (401, 403)


def test_aptitude_topic_catalog_requires_a_bearer_token():
    app = initialize_backend_application()
    response = TestClient(app).get("/api/aptitude/topics")
    assert response.status_code in (401, 403)


def test_record_and_read_history(client):
    payload = {
        "type": "technical",
        "sessionId": "tech-1",
        "durationSeconds": 900,
        "summary": "Technical interview for Backend Developer.",
        "dataReference": {"role": "Backend Developer", "questionsAnswered": 3},
    }
    created = client.post("/api/history", json=payload)
    assert created.status_code == 201
    body = created.json()
    assert body["dataReference"] == {"role": "Backend Developer", "questions_answered": 3}

    listing = client.get("/api/history").json()
    assert listing["count"] == 1
    assert listing["items"][0]["sessionId"] == "tech-1"

    assert client.get(f"/api/history/{body['id']}").status_code == 200
    assert client.get("/api/history/99999").status_code == 404

    profile = client.get("/api/progress/profile").json()
    assert profile["streak"] == 1


def test_history_rejects_unknown_type(client):
    response = client.post("/api/history", json={"type": "karaoke", "sessionId": "x", "summary": "?"})
    assert response.status_code == 422


def test_review_hub_round_trip(client):
    question = {
        "question": "Find the odd one out: 3, 5, 9, 11",
        "options": ["3", "5", "9", "11"],
        "correctAnswer": "9",
        "subTopic": "Number Series",
    }
    tagged = client.post("/api/review-hub/questions", json={"question": question, "quizTopic": "Logical Reasoning"})
    assert tagged.status_code == 201
    revision_id = tagged.json()["id"]
    assert client.get("/api/review-hub/questions").json()["count"] == 1

    removed = client.delete(f"/api/review-hub/questions/{revision_id}", params={"fromReviewHub": "true"})
    assert removed.status_code == 204
    assert client.delete(f"/api/review-hub/questions/{revision_id}").status_code == 404

    history = client.get("/api/history").json()["items"]
    assert history[0]["type"] == "review_hub"


def test_aptitude_practice_quiz_over_http(client, user_id):
    assert client.post("/api/aptitude/practice/start", json={"subTopics": []}).status_code == 422

    started = client.post(
        "/api/aptitude/practice/start",
        json={"subTopics": ["Percentage"], "numQuestions": 2, "difficulty": "Easy"},
    )
    assert started.status_code == 201
    state = started.json()
    assert state["totalQuestions"] == 2

    option = state["question"]["options"][0]
    step = client.post("/api/aptitude/quiz/answer", json={"answer": option}).json()
    assert step["finished"] is False

    result = client.post("/api/aptitude/quiz/submit")
    assert result.status_code == 200
    assert result.json()["total"] == 2
    assert client.get("/api/aptitude/quiz").status_code == 409

    status = client.get("/api/aptitude/diagnostic/status").json()
    assert status["hasCompletedDiagnostic"] is False
    assert status["savedQuiz"]["hasSavedQuiz"] is False


def test_goal_with_past_deadline_is_rejected(client):
    response = client.post(
        "/api/progress/goals",
        json={"topic": "Verbal Ability", "targetAccuracy": 80, "deadline": "2000-01-01T00:00:00Z"},
    )
    assert response.status_code == 422
    assert client.get("/api/progress/goals/active").json()["goal"] is None


def test_badge_board_lists_full_catalog(client):
    board = client.get("/api/progress/badges/board").json()
    assert board["totalCount"] == 19
    assert board["earnedCount"] == 0
    assert [tier["tier"] for tier in board["tiers"]] == ["Gold", "Silver", "Bronze"]


@pytest.fixture
def interview_client(ai, recorder, user_id):
    ai.question_limit = 1
    app = initialize_backend_application()
    # The startup hook connects to PostgreSQL; the interview never touches the database here
    app.router.on_startup.clear()
    app.router.on_shutdown.clear()
    service = MockInterviewService(LiveSessionRegistry(), ai, recorder)
    app.dependency_overrides[get_mock_interview_service] = lambda: service
    app.dependency_overrides[get_current_user_id] = lambda: user_id
    # One event loop for the whole test so the background question fetch survives between requests
    with TestClient(app) as test_client:
        yield test_client


def test_mock_interview_over_http(interview_client, ai, recorder):
    started = interview_client.post("/api/mock-interview/start", json={"durationMinutes": 45})
    assert started.status_code == 201
    state = started.json()
    assert state["phase"] == "active"
    assert state["round"] == "Aptitude"
    assert state["question"]["options"] == ["a", "b", "c", "d"]

    assert interview_client.post("/api/mock-interview/proceed").status_code == 409
    assert interview_client.post("/api/mock-interview/answer", json={"answer": "z"}).status_code == 409

    assert interview_client.post("/api/mock-interview/answer", json={"answer": "a"}).status_code == 200
    state = interview_client.post("/api/mock-interview/proceed").json()
    assert state["round"] == "Technical"
    assert state["question"]["text"] == "T0"

    interview_client.post("/api/mock-interview/answer", json={"answer": "I would add an index."})
    ai.feedback_error = AIServiceError("unreachable")
    failed = interview_client.post("/api/mock-interview/proceed")
    assert failed.status_code == 502
    assert interview_client.get("/api/mock-interview").json()["round"] == "Technical"

    ai.feedback_error = None
    state = interview_client.post("/api/mock-interview/proceed").json()
    assert state["round"] == "HR"

    interview_client.post("/api/mock-interview/answer", json={"answer": "I mediated a team conflict."})
    state = interview_client.post("/api/mock-interview/proceed").json()
    assert state["phase"] == "results"
    assert state["report"]["recommendation"] == "Hire"
    assert [r["type"] for r in state["results"]] == ["Aptitude", "Technical", "HR"]
    assert len(recorder.entries) == 1

    assert interview_client.get("/api/mock-interview").json()["phase"] == "results"
    assert interview_client.delete("/api/mock-interview").status_code == 204
    assert interview_client.get("/api/mock-interview").status_code == 404
    assert interview_client.delete("/api/mock-interview").status_code == 404


def test_mock_interview_routes_need_a_live_interview(interview_client):
    assert interview_client.get("/api/mock-interview").status_code == 404
    assert interview_client.post("/api/mock-interview/proceed").status_code == 409
    assert interview_client.post("/api/mock-interview/answer", json={"answer": "a"}).status_code == 409


def test_stopped_interview_is_gone_over_http(interview_client):
    interview_client.post("/api/mock-interview/start", json={"durationMinutes": 60})
    assert interview_client.delete("/api/mock-interview").status_code == 204
    assert interview_client.get("/api/mock-interview").status_code == 404


def test_technical_practice_over_http(client, practice_ai):
    client.app.dependency_overrides[get_practice_ai] = lambda: practice_ai

    assert client.post("/api/practice/quiz/start").status_code == 422
    assert client.post("/api/practice/technical/answer", json={"answer": "a"}).status_code == 409

    started = client.post("/api/practice/technical/start", json={"role": "Backend Developer", "techStack": ["Go"]})
    assert started.status_code == 201
    assert started.json()["currentQuestion"] == "technical opener"
    assert started.json()["config"]["techStack"] == ["Go"]

    assert client.post("/api/practice/technical/answer", json={"answer": ""}).status_code == 422
    state = client.post("/api/practice/technical/answer", json={"answer": "Use a queue."}).json()
    assert state["currentQuestion"] == "technical follow-up 1"

    practice_ai.follow_up_error = AIServiceError("unreachable")
    assert client.post("/api/practice/technical/answer", json={"answer": "Retry later."}).status_code == 502
    assert len(client.get("/api/practice/technical").json()["turns"]) == 1

    ended = client.post("/api/practice/technical/end", json={"answer": "Add backoff."})
    assert ended.status_code == 200
    report = ended.json()["report"]
    assert report["rating"] == "Strong"
    assert report["saved"] is True
    assert len(report["feedback"]) == 2

    assert client.get("/api/practice/technical").status_code == 404
    history = client.get("/api/history").json()["items"]
    assert history[0]["type"] == "technical"
    assert history[0]["id"] == report["historyId"]


def test_hr_practice_ended_early_saves_nothing(client, practice_ai):
    client.app.dependency_overrides[get_practice_ai] = lambda: practice_ai
    assert client.post("/api/practice/hr/start").status_code == 201
    ended = client.post("/api/practice/hr/end")
    assert ended.status_code == 200
    assert ended.json()["report"] is None
    assert client.get("/api/history").json()["count"] == 0
    assert client.delete("/api/practice/hr").status_code == 404


def test_group_discussion_over_http(client, practice_ai):
    client.app.dependency_overrides[get_practice_ai] = lambda: practice_ai

    topics = client.get("/api/group-discussion/topics").json()["topics"]
    assert len(topics) == 3

    assert client.post("/api/group-discussion/start", json={"topic": "x", "durationMinutes": 7}).status_code == 422
    started = client.post("/api/group-discussion/start", json={"topic": topics[0]["topic"], "durationMinutes": 10})
    assert started.status_code == 201
    assert started.json()["timeLeftSeconds"] == pytest.approx(600, abs=5)

    state = client.post("/api/group-discussion/messages", json={"message": "Hard work compounds."}).json()
    assert [m["participant"] for m in state["chatLog"]] == ["Moderator", "You", "Ben"]

    ended = client.post("/api/group-discussion/end")
    assert ended.status_code == 200
    assert ended.json()["saved"] is True
    assert client.post("/api/group-discussion/end").status_code == 409
    assert client.get("/api/history").json()["items"][0]["type"] == "group_discussion"


def test_profile_review_over_http(client, practice_ai):
    client.app.dependency_overrides[get_practice_ai] = lambda: practice_ai

    assert client.post("/api/profile-review", json={"resumeText": "  "}).status_code == 422
    created = client.post("/api/profile-review", json={"resumeText": "Built a compiler.", "targetCompanyTier": "FAANG"})
    assert created.status_code == 201
    assert created.json()["keyRecommendations"][0] == "Quantify impact"

    practice_ai.review_error = AIServiceError("unreachable")
    assert client.post("/api/profile-review", json={"resumeText": "Built a compiler."}).status_code == 502
    assert client.get("/api/history").json()["count"] == 1
