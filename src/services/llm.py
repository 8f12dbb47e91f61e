"""OpenAI access for every generative task of the app.

Each task builds a prompt, calls :func:`structured_output` in JSON mode and
validates the reply against a small pydantic model. Callers get an
``LLMResult``: either a validated value or an error string. Transport
failures (network, auth, rate limits) raise ``AIServiceError`` so callers can
tell "the service is down" apart from "the reply was unusable".
"""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from typing import Any, Generic, Type, TypeVar

import openai
import pydantic
from openai import AsyncOpenAI

from src.config.manager import settings
from src.models.schemas.aptitude import APTITUDE_SUB_TOPICS, AptitudeQuestion, AptitudeTopicEnum
from src.models.schemas.history import GDChatMessage
from src.models.schemas.practice import DiscussionTopic, InterviewConfig, PracticeKindEnum, ProfileReviewRequest
from src.utilities.exceptions.domain import AIServiceError

logger = logging.getLogger(__name__)

FEEDBACK_PLACEHOLDER = "Sorry, I was unable to generate feedback for this answer."
SUGGESTIONS_PLACEHOLDER = (
    "Could not load suggestions. Focus on topics in the 'Slow & Inaccurate' and 'Fast & Inaccurate' categories."
)

T = TypeVar("T")
M = TypeVar("M", bound=pydantic.BaseModel)

# Lazy client holder; create only when needed and when API key is present
_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI | None:
    global _client
    if _client is not None:
        return _client
    api_key = settings.OPENAI_API_KEY
    if not api_key:
        return None
    _client = AsyncOpenAI(
        api_key=api_key,
        timeout=float(getattr(settings, "OPENAI_TIMEOUT_SECONDS", 60.0)),
        max_retries=3,
    )
    return _client


@dataclasses.dataclass(frozen=True)
class LLMResult(Generic[T]):
    """Outcome of one AI call: ``value`` on success, ``error`` otherwise."""

    value: T | None = None
    error: str | None = None
    latency_ms: int | None = None
    model: str = ""

    @property
    def ok(self) -> bool:
        return self.value is not None and self.error is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok else default  # type: ignore[return-value]


class AptitudeQuestionLLM(pydantic.BaseModel):
    question: str
    options: list[str]
    correct_answer: str
    explanation: str = ""
    sub_topic: str = "General"


class AptitudeQuestionsLLM(pydantic.BaseModel):
    questions: list[AptitudeQuestionLLM] = pydantic.Field(default_factory=list)


class QuestionListLLM(pydantic.BaseModel):
    questions: list[str] = pydantic.Field(default_factory=list)


class FeedbackListLLM(pydantic.BaseModel):
    feedbacks: list[str] = pydantic.Field(default_factory=list)


class OverallReportLLM(pydantic.BaseModel):
    recommendation: str
    summary: str
    report: str


class GoalTopicLLM(pydantic.BaseModel):
    topic: AptitudeTopicEnum


class ParsedGoalLLM(pydantic.BaseModel):
    topic: AptitudeTopicEnum = AptitudeTopicEnum.QUANTITATIVE
    target_accuracy: float = 80.0
    days: int = 30


class SuggestionsLLM(pydantic.BaseModel):
    suggestions: str


class SingleQuestionLLM(pydantic.BaseModel):
    question: str


class SessionReportLLM(pydantic.BaseModel):
    rating: str
    summary: str
    report: str


class DiscussionTopicLLM(pydantic.BaseModel):
    topic: str
    description: str


class DiscussionTopicsLLM(pydantic.BaseModel):
    topics: list[DiscussionTopicLLM] = pydantic.Field(default_factory=list)


class DiscussionOpeningLLM(pydantic.BaseModel):
    message: str


class DiscussionReplyLLM(pydantic.BaseModel):
    participant: str
    message: str


class DiscussionTurnLLM(pydantic.BaseModel):
    responses: list[DiscussionReplyLLM] = pydantic.Field(default_factory=list)


class ProfileReviewLLM(pydantic.BaseModel):
    rating: str
    summary: str
    key_recommendations: list[str] = pydantic.Field(default_factory=list)
    feedback: str


FAILED_REPORT = OverallReportLLM(
    recommendation="N/A",
    summary="Error generating feedback.",
    report="Could not generate a report.",
)
FAILED_SESSION_REPORT = SessionReportLLM(
    rating="N/A",
    summary="Error generating feedback.",
    report="Could not generate a report.",
)
FAILED_PROFILE_REVIEW = ProfileReviewLLM(
    rating="N/A",
    summary="Error generating feedback.",
    key_recommendations=[],
    feedback="Could not generate a report.",
)


async def structured_output(
    model_class: Type[M],
    *,
    system_prompt: str,
    user_content: Any,
    temperature: float = 0,
) -> LLMResult[M]:
    """Call OpenAI asynchronously with JSON response_format and validate against Pydantic model."""
    model = settings.OPENAI_MODEL
    client = _get_client()
    if client is None:
        return LLMResult(value=None, error="OpenAI API key is not configured", latency_ms=None, model=model)

    start = time.perf_counter()
    # Use Chat Completions for all models; switch token param for newer families
    is_new_family = any(str(model).lower().startswith(p) for p in ("gpt-5", "gpt-4.1", "o4", "o3"))
    token_param_key = "max_completion_tokens" if is_new_family else "max_tokens"
    kwargs: dict[str, Any] = {
        "model": model,
        "response_format": {"type": "json_object"},
        token_param_key: 4096,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content if isinstance(user_content, str) else json.dumps(user_content, ensure_ascii=False)},
        ],
    }
    # Only include temperature for older models; new families accept only the default
    if not is_new_family:
        kwargs["temperature"] = temperature

    try:
        resp = await client.chat.completions.create(**kwargs)
    except openai.APIError as e:
        logger.exception("OpenAI request failed for %s", model_class.__name__)
        raise AIServiceError(str(e)) from e

    latency_ms = int((time.perf_counter() - start) * 1000)
    raw = resp.choices[0].message.content or "{}"
    try:
        parsed = model_class.model_validate(json.loads(raw))
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        logger.warning("Unusable %s reply from %s: %s", model_class.__name__, model, e)
        return LLMResult(value=None, error=str(e), latency_ms=latency_ms, model=model)
    return LLMResult(value=parsed, error=None, latency_ms=latency_ms, model=model)


def _main_topics_for(sub_topics: list[str]) -> list[str]:
    found: list[str] = []
    for topic, subs in APTITUDE_SUB_TOPICS.items():
        if any(sub in subs for sub in sub_topics) and topic.value not in found:
            found.append(topic.value)
    return found


async def generate_aptitude_questions(
    sub_topics: list[str], count: int, difficulty: str
) -> LLMResult[list[AptitudeQuestion]]:
    main_topics = _main_topics_for(sub_topics)
    if len(main_topics) > 1:
        topic_description = f"a mix of topics from {', '.join(main_topics)}"
    elif main_topics:
        topic_description = f"the topic of {main_topics[0]}"
    else:
        topic_description = "a mix of general aptitude topics"

    sys_prompt = (
        "You write multiple-choice aptitude questions for engineering students preparing for campus placements. "
        "Return ONLY valid JSON with key 'questions': an array of objects with fields "
        "question, options (exactly four distinct strings), correct_answer (the text of the correct option), "
        "explanation (step-by-step markdown solution, formulas wrapped in backticks) and sub_topic."
    )
    user_prompt = {
        "count": count,
        "difficulty": difficulty,
        "coverage": topic_description,
        "focus_sub_topics": sub_topics,
        "constraints": [
            "correct_answer must match one of the options exactly",
            "sub_topic must be one of focus_sub_topics when they are given",
        ],
    }
    result = await structured_output(AptitudeQuestionsLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.4)
    if not result.ok:
        return LLMResult(value=None, error=result.error, latency_ms=result.latency_ms, model=result.model)

    questions = [
        AptitudeQuestion.model_validate(item.model_dump())
        for item in result.value.questions  # type: ignore[union-attr]
        if item.question.strip() and item.correct_answer in item.options
    ]
    if not questions:
        return LLMResult(value=None, error="No usable questions in reply", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=questions[:count], error=None, latency_ms=result.latency_ms, model=result.model)


async def generate_technical_questions(role: str, company_tier: str, count: int) -> LLMResult[list[str]]:
    sys_prompt = (
        "You are an expert interviewer preparing a verbal technical interview. "
        "Return ONLY valid JSON with key 'questions' (array of strings)."
    )
    user_prompt = {
        "role": role,
        "experience": "Intern/Fresher",
        "context": f"The candidate is preparing for a role at a {company_tier} company.",
        "count": count,
        "constraints": [
            "Distinct, open-ended questions phrased conversationally",
            "Cover fundamentals through more advanced concepts",
        ],
    }
    result = await structured_output(QuestionListLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.3)
    questions = [q.strip() for q in (result.value.questions if result.ok else []) if q.strip()]  # type: ignore[union-attr]
    if not questions:
        return LLMResult(value=None, error=result.error or "No questions in reply", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=questions[:count], error=None, latency_ms=result.latency_ms, model=result.model)


async def generate_hr_questions(count: int) -> LLMResult[list[str]]:
    sys_prompt = (
        "You are an HR interviewer. Generate distinct behavioral or situational interview questions covering "
        "teamwork, leadership, handling pressure, dealing with conflict and motivation. "
        "Return ONLY valid JSON with key 'questions' (array of strings)."
    )
    result = await structured_output(QuestionListLLM, system_prompt=sys_prompt, user_content={"count": count}, temperature=0.3)
    questions = [q.strip() for q in (result.value.questions if result.ok else []) if q.strip()]  # type: ignore[union-attr]
    if not questions:
        return LLMResult(value=None, error=result.error or "No questions in reply", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=questions[:count], error=None, latency_ms=result.latency_ms, model=result.model)


def _transcript(conversation: list[tuple[str, str]]) -> list[dict[str, str]]:
    return [{"question": q, "candidate_answer": a} for q, a in conversation]


def _align_feedbacks(result: LLMResult[FeedbackListLLM], expected: int) -> list[str]:
    """One feedback string per answer; missing or unusable entries become the placeholder."""
    feedbacks = list(result.value.feedbacks) if result.ok else []  # type: ignore[union-attr]
    if len(feedbacks) != expected:
        logger.warning("Expected %d feedback items, got %d", expected, len(feedbacks))
    aligned = [f if f and f.strip() else FEEDBACK_PLACEHOLDER for f in feedbacks[:expected]]
    aligned.extend([FEEDBACK_PLACEHOLDER] * (expected - len(aligned)))
    return aligned


async def technical_round_feedback(conversation: list[tuple[str, str]], role: str) -> list[str]:
    sys_prompt = (
        "You are a senior engineering manager giving feedback on a technical interview. "
        "Give detailed, constructive markdown feedback for EACH answer. "
        "Return ONLY valid JSON with key 'feedbacks' (array of strings, one per Q&A pair, same order)."
    )
    user_prompt = {"role": role, "experience": "Intern/Fresher", "transcript": _transcript(conversation)}
    result = await structured_output(FeedbackListLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.2)
    return _align_feedbacks(result, len(conversation))


async def hr_round_feedback(conversation: list[tuple[str, str]]) -> list[str]:
    sys_prompt = (
        "You are an expert HR manager giving feedback on a behavioral interview. "
        "For EACH answer comment on structure (STAR method), clarity and impact using markdown. "
        "Return ONLY valid JSON with key 'feedbacks' (array of strings, one per Q&A pair, same order)."
    )
    result = await structured_output(
        FeedbackListLLM, system_prompt=sys_prompt, user_content={"transcript": _transcript(conversation)}, temperature=0.2
    )
    return _align_feedbacks(result, len(conversation))


async def mock_interview_report(results: list[dict[str, Any]], role: str, company_tier: str) -> OverallReportLLM:
    """Hiring recommendation, one-paragraph summary and markdown report for a finished mock interview."""
    sys_prompt = (
        f"You are a Senior Hiring Manager at a {company_tier} company hiring for the {role} position. "
        "You have just completed a multi-round interview (Aptitude, Technical, HR) with a candidate. "
        "Return ONLY valid JSON with keys: "
        "'recommendation' (one of 'Strong Hire', 'Hire', 'Leaning No', 'No Hire'), "
        "'summary' (a single paragraph on performance across all rounds) and "
        "'report' (markdown with sections: Overall Performance Summary, Key Strengths, "
        "Major Areas for Development, Round-by-Round Analysis, Final Advice for the Candidate)."
    )
    try:
        result = await structured_output(OverallReportLLM, system_prompt=sys_prompt, user_content={"rounds": results}, temperature=0.2)
    except AIServiceError:
        return FAILED_REPORT
    return result.value_or(FAILED_REPORT)


async def extract_topic_from_goal(goal_text: str) -> AptitudeTopicEnum:
    sys_prompt = (
        "Identify the main aptitude topic of the user's goal. Return ONLY valid JSON with key 'topic', one of: "
        + ", ".join(f"'{t.value}'" for t in AptitudeTopicEnum)
        + f". If unclear, use '{AptitudeTopicEnum.QUANTITATIVE.value}'."
    )
    try:
        result = await structured_output(GoalTopicLLM, system_prompt=sys_prompt, user_content=goal_text)
    except AIServiceError:
        return AptitudeTopicEnum.QUANTITATIVE
    return result.value.topic if result.ok else AptitudeTopicEnum.QUANTITATIVE  # type: ignore[union-attr]


async def parse_user_goal(goal_text: str, current_accuracy: float | None) -> LLMResult[ParsedGoalLLM]:
    if current_accuracy is not None:
        suggestion = (
            f"The user's current average accuracy in the topic is about {current_accuracy:.0f}%. "
            "If no target is given, suggest one 10-15% higher, rounded to the nearest 5, not above 95."
        )
    else:
        suggestion = "The user has no past data for this topic. If no target is given, suggest 80."
    sys_prompt = (
        "Parse the user's aptitude preparation goal. Return ONLY valid JSON with keys "
        "'topic' (one of " + ", ".join(f"'{t.value}'" for t in AptitudeTopicEnum) + f"; default '{AptitudeTopicEnum.QUANTITATIVE.value}'), "
        "'target_accuracy' (number 50-100) and 'days' (number 7-90, default 30; convert periods like '3 weeks'). "
        + suggestion
    )
    return await structured_output(ParsedGoalLLM, system_prompt=sys_prompt, user_content=goal_text)


async def generate_improvement_suggestions(
    slow_inaccurate: list[str], fast_inaccurate: list[str], slow_accurate: list[str]
) -> str:
    sys_prompt = (
        "You are a career coach reviewing a student's aptitude test. Give concise, encouraging, actionable "
        "suggestions in markdown bullet points for the top 2-3 areas to focus on. "
        "Return ONLY valid JSON with key 'suggestions' (a markdown string)."
    )
    user_prompt = {
        "weaknesses_slow_and_inaccurate": slow_inaccurate or ["None"],
        "needs_caution_fast_and_inaccurate": fast_inaccurate or ["None"],
        "needs_speed_slow_and_accurate": slow_accurate or ["None"],
    }
    try:
        result = await structured_output(SuggestionsLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.4)
    except AIServiceError:
        return SUGGESTIONS_PLACEHOLDER
    return result.value.suggestions if result.ok else SUGGESTIONS_PLACEHOLDER  # type: ignore[union-attr]


def _single_question(result: LLMResult[SingleQuestionLLM]) -> LLMResult[str]:
    question = result.value.question.strip() if result.ok else ""  # type: ignore[union-attr]
    if not question:
        return LLMResult(value=None, error=result.error or "Empty question in reply", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=question, error=None, latency_ms=result.latency_ms, model=result.model)


def _candidate_profile(config: InterviewConfig) -> dict[str, Any]:
    return {
        "role": config.role,
        "experience": config.experience,
        "tech_stack": config.tech_stack,
        "job_description": config.job_description or "Not provided",
    }


async def generate_first_technical_question(config: InterviewConfig) -> LLMResult[str]:
    sys_prompt = (
        "You are a friendly but rigorous technical interviewer. Open a verbal interview with a single question "
        "suited to the candidate's role, experience and tech stack. If a job description is given, ground the "
        "question in it. Return ONLY valid JSON with key 'question' (string)."
    )
    result = await structured_output(SingleQuestionLLM, system_prompt=sys_prompt, user_content=_candidate_profile(config), temperature=0.5)
    return _single_question(result)


async def generate_technical_follow_up(conversation: list[tuple[str, str]], config: InterviewConfig) -> LLMResult[str]:
    sys_prompt = (
        "You are a technical interviewer continuing a verbal interview. Read the transcript and ask ONE next "
        "question: dig deeper into the last answer when it was shallow, otherwise move to a new area of the "
        "candidate's stack. Do not repeat earlier questions. Return ONLY valid JSON with key 'question' (string)."
    )
    user_prompt = {"candidate": _candidate_profile(config), "transcript": _transcript(conversation)}
    result = await structured_output(SingleQuestionLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.5)
    return _single_question(result)


async def technical_session_report(conversation: list[tuple[str, str]], config: InterviewConfig) -> SessionReportLLM:
    sys_prompt = (
        f"You are a senior engineering manager who just interviewed a candidate for the {config.role} position. "
        "Return ONLY valid JSON with keys: 'rating' (one of 'Strong', 'Average', 'Weak'), "
        "'summary' (one paragraph) and 'report' (markdown with sections: Strengths, Areas to Improve, "
        "Topics to Revise, Next Steps)."
    )
    user_prompt = {"candidate": _candidate_profile(config), "transcript": _transcript(conversation)}
    try:
        result = await structured_output(SessionReportLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.2)
    except AIServiceError:
        return FAILED_SESSION_REPORT
    return result.value_or(FAILED_SESSION_REPORT)


async def generate_first_hr_question() -> LLMResult[str]:
    sys_prompt = (
        "You are a warm, professional HR interviewer. Open the interview with a single common opening question "
        "such as asking the candidate to introduce themselves. Return ONLY valid JSON with key 'question' (string)."
    )
    result = await structured_output(SingleQuestionLLM, system_prompt=sys_prompt, user_content={"stage": "opening"}, temperature=0.7)
    return _single_question(result)


async def generate_hr_follow_up(conversation: list[tuple[str, str]]) -> LLMResult[str]:
    sys_prompt = (
        "You are an HR interviewer. Based on the transcript ask ONE behavioral or situational question that has "
        "not been asked yet, building on the candidate's answers where natural. "
        "Return ONLY valid JSON with key 'question' (string)."
    )
    result = await structured_output(
        SingleQuestionLLM, system_prompt=sys_prompt, user_content={"transcript": _transcript(conversation)}, temperature=0.7
    )
    return _single_question(result)


async def hr_session_report(conversation: list[tuple[str, str]], feedbacks: list[str]) -> SessionReportLLM:
    sys_prompt = (
        "You are an expert HR manager summarising a behavioral interview. "
        "Return ONLY valid JSON with keys: 'rating' (one of 'Needs Improvement', 'Promising', 'Strong'), "
        "'summary' (one paragraph) and 'report' (markdown with sections: Communication, Use of the STAR Method, "
        "Strengths, Areas to Improve)."
    )
    user_prompt = {
        "transcript": [
            {"question": q, "candidate_answer": a, "feedback": f} for (q, a), f in zip(conversation, feedbacks)
        ]
    }
    try:
        result = await structured_output(SessionReportLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.2)
    except AIServiceError:
        return FAILED_SESSION_REPORT
    return result.value_or(FAILED_SESSION_REPORT)


async def generate_discussion_topics() -> LLMResult[list[DiscussionTopic]]:
    sys_prompt = (
        "Suggest three current, debatable group discussion topics for campus placement practice. "
        "Return ONLY valid JSON with key 'topics': an array of objects with 'topic' and 'description' "
        "(one sentence)."
    )
    result = await structured_output(DiscussionTopicsLLM, system_prompt=sys_prompt, user_content={"count": 3}, temperature=0.9)
    topics = [
        DiscussionTopic(topic=item.topic.strip(), description=item.description.strip())
        for item in (result.value.topics if result.ok else [])  # type: ignore[union-attr]
        if item.topic.strip()
    ]
    if not topics:
        return LLMResult(value=None, error=result.error or "No topics in reply", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=topics, error=None, latency_ms=result.latency_ms, model=result.model)


async def discussion_opening(topic: str) -> LLMResult[str]:
    sys_prompt = (
        "You moderate a group discussion. Write a short opening statement that introduces the topic, frames both "
        "sides and invites the participants to begin. Return ONLY valid JSON with key 'message' (string)."
    )
    result = await structured_output(DiscussionOpeningLLM, system_prompt=sys_prompt, user_content={"topic": topic}, temperature=0.7)
    message = result.value.message.strip() if result.ok else ""  # type: ignore[union-attr]
    if not message:
        return LLMResult(value=None, error=result.error or "Empty opening", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=message, error=None, latency_ms=result.latency_ms, model=result.model)


async def orchestrate_discussion_turn(
    topic: str, chat_log: list[GDChatMessage], participants: tuple[str, str]
) -> LLMResult[list[GDChatMessage]]:
    """Replies from the AI participants after the user's last message.

    One participant is an analyst who argues from data and precedent, the other a visionary who argues from
    trends and possibilities. Either may stay silent; replies from unknown speakers are dropped.
    """
    analyst, visionary = participants
    sys_prompt = (
        f"You orchestrate two participants in a group discussion on '{topic}'. "
        f"{analyst} is analytical and grounded in data and precedent. "
        f"{visionary} is a visionary who argues from trends and future possibilities. "
        "Given the chat log, decide who responds next to the user's latest point (one or both), keeping each "
        "reply to two or three sentences. Return ONLY valid JSON with key 'responses': an array of objects "
        "with 'participant' (one of the two names) and 'message'."
    )
    user_prompt = {"chat_log": [{"participant": m.participant, "message": m.message} for m in chat_log]}
    result = await structured_output(DiscussionTurnLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.8)
    replies = [
        GDChatMessage(participant=item.participant, message=item.message.strip())
        for item in (result.value.responses if result.ok else [])  # type: ignore[union-attr]
        if item.participant in participants and item.message.strip()
    ]
    if not replies:
        return LLMResult(value=None, error=result.error or "No usable replies", latency_ms=result.latency_ms, model=result.model)
    return LLMResult(value=replies, error=None, latency_ms=result.latency_ms, model=result.model)


async def review_profile(request: ProfileReviewRequest) -> ProfileReviewLLM:
    """Recruiter-style resume review. Transport failures propagate; an unusable reply yields the N/A review."""
    tier = request.target_company_tier or "a leading tech"
    sys_prompt = (
        f"You are an experienced technical recruiter at {tier} company reviewing a candidate for the "
        f"{request.target_role} role. Return ONLY valid JSON with keys: 'rating' (one of 'Needs Work', 'Good', "
        "'Excellent'), 'summary' (one paragraph), 'key_recommendations' (array of exactly three short strings) "
        "and 'feedback' (markdown with sections: First Impressions, Strengths, Gaps for the Target Role, "
        "Resume Formatting, Online Presence)."
    )
    user_prompt = {
        "resume": request.resume_text,
        "linkedin_url": request.linkedin_url or "Not provided",
        "github_url": request.github_url or "Not provided",
    }
    result = await structured_output(ProfileReviewLLM, system_prompt=sys_prompt, user_content=user_prompt, temperature=0.3)
    review = result.value_or(FAILED_PROFILE_REVIEW)
    if review is not FAILED_PROFILE_REVIEW:
        review = review.model_copy(update={"key_recommendations": review.key_recommendations[:3]})
    return review


class OpenAIInterviewAI:
    """Default AI backend for the mock interview; tests swap in fakes with the same methods."""

    async def aptitude_questions(self, count: int) -> LLMResult[list[AptitudeQuestion]]:
        return await generate_aptitude_questions([], count, "Mixed")

    async def technical_questions(self, role: str, company_tier: str, count: int) -> LLMResult[list[str]]:
        return await generate_technical_questions(role, company_tier, count)

    async def hr_questions(self, count: int) -> LLMResult[list[str]]:
        return await generate_hr_questions(count)

    async def technical_feedback(self, conversation: list[tuple[str, str]], role: str) -> list[str]:
        return await technical_round_feedback(conversation, role)

    async def hr_feedback(self, conversation: list[tuple[str, str]]) -> list[str]:
        return await hr_round_feedback(conversation)

    async def overall_report(self, results: list[dict[str, Any]], role: str, company_tier: str) -> OverallReportLLM:
        return await mock_interview_report(results, role, company_tier)


class OpenAIPracticeAI:
    """Default AI backend for the standalone practice modules."""

    async def first_question(self, kind: PracticeKindEnum, config: InterviewConfig | None) -> LLMResult[str]:
        if kind is PracticeKindEnum.TECHNICAL:
            return await generate_first_technical_question(config or InterviewConfig())
        return await generate_first_hr_question()

    async def follow_up_question(
        self, kind: PracticeKindEnum, conversation: list[tuple[str, str]], config: InterviewConfig | None
    ) -> LLMResult[str]:
        if kind is PracticeKindEnum.TECHNICAL:
            return await generate_technical_follow_up(conversation, config or InterviewConfig())
        return await generate_hr_follow_up(conversation)

    async def answer_feedback(
        self, kind: PracticeKindEnum, conversation: list[tuple[str, str]], config: InterviewConfig | None
    ) -> list[str]:
        if kind is PracticeKindEnum.TECHNICAL:
            return await technical_round_feedback(conversation, (config or InterviewConfig()).role)
        return await hr_round_feedback(conversation)

    async def session_report(
        self,
        kind: PracticeKindEnum,
        conversation: list[tuple[str, str]],
        feedbacks: list[str],
        config: InterviewConfig | None,
    ) -> SessionReportLLM:
        if kind is PracticeKindEnum.TECHNICAL:
            return await technical_session_report(conversation, config or InterviewConfig())
        return await hr_session_report(conversation, feedbacks)

    async def discussion_topics(self) -> LLMResult[list[DiscussionTopic]]:
        return await generate_discussion_topics()

    async def discussion_opening(self, topic: str) -> LLMResult[str]:
        return await discussion_opening(topic)

    async def discussion_turn(
        self, topic: str, chat_log: list[GDChatMessage], participants: tuple[str, str]
    ) -> LLMResult[list[GDChatMessage]]:
        return await orchestrate_discussion_turn(topic, chat_log, participants)

    async def profile_review(self, request: ProfileReviewRequest) -> ProfileReviewLLM:
        return await review_profile(request)
