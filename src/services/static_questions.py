"""Generic question bank used when question generation is unavailable.

The mock interview and the practice quizzes fall back to these sets so a
session can still start (degraded) when the AI service fails.
"""

from __future__ import annotations

import random

from src.models.schemas.aptitude import AptitudeQuestion


_APTITUDE_BANK: list[dict[str, object]] = [
    {
        "question": "A shopkeeper marks an item 25% above cost and gives a 10% discount. What is the profit percentage?",
        "options": ["12.5%", "15%", "10%", "22.5%"],
        "correct_answer": "12.5%",
        "explanation": "Selling price = `1.25 x 0.9 = 1.125` of cost, so the profit is **12.5%**.",
        "sub_topic": "Profit & Loss",
    },
    {
        "question": "What is 15% of 240?",
        "options": ["32", "36", "38", "40"],
        "correct_answer": "36",
        "explanation": "`0.15 x 240 = 36`.",
        "sub_topic": "Percentage",
    },
    {
        "question": "A can finish a job in 12 days and B in 18 days. Working together, how many days do they take?",
        "options": ["6.8", "7.2", "7.5", "8"],
        "correct_answer": "7.2",
        "explanation": "Combined rate = `1/12 + 1/18 = 5/36`, so time = `36/5 = 7.2` days.",
        "sub_topic": "Time & Work",
    },
    {
        "question": "A train 150 m long passes a pole in 10 seconds. What is its speed in km/h?",
        "options": ["45", "50", "54", "60"],
        "correct_answer": "54",
        "explanation": "Speed = `150/10 = 15 m/s`; `15 x 18/5 = 54 km/h`.",
        "sub_topic": "Time, Speed & Distance",
    },
    {
        "question": "What is the HCF of 36 and 84?",
        "options": ["6", "12", "18", "24"],
        "correct_answer": "12",
        "explanation": "`36 = 2^2 x 3^2`, `84 = 2^2 x 3 x 7`; HCF = `2^2 x 3 = 12`.",
        "sub_topic": "HCF & LCM",
    },
    {
        "question": "Two dice are thrown. What is the probability that the sum is 7?",
        "options": ["1/6", "1/9", "1/12", "5/36"],
        "correct_answer": "1/6",
        "explanation": "Six favourable outcomes out of 36, so `6/36 = 1/6`.",
        "sub_topic": "Probability",
    },
    {
        "question": "Find the next number in the series: 2, 6, 12, 20, 30, ?",
        "options": ["40", "42", "44", "48"],
        "correct_answer": "42",
        "explanation": "Differences are 4, 6, 8, 10, so the next difference is 12: `30 + 12 = 42`.",
        "sub_topic": "Number Series",
    },
    {
        "question": "Pointing to a man, Riya says, 'He is the son of my grandfather's only son.' How is the man related to Riya?",
        "options": ["Cousin", "Brother", "Uncle", "Father"],
        "correct_answer": "Brother",
        "explanation": "Her grandfather's only son is her father, and his son is her **brother**.",
        "sub_topic": "Blood Relations",
    },
    {
        "question": "If CAT is coded as DBU, how is DOG coded?",
        "options": ["EPH", "EOH", "FPH", "DPH"],
        "correct_answer": "EPH",
        "explanation": "Each letter is shifted forward by one: D->E, O->P, G->H.",
        "sub_topic": "Coding-Decoding",
    },
    {
        "question": "Choose the word most similar in meaning to 'Candid'.",
        "options": ["Frank", "Secretive", "Careful", "Bright"],
        "correct_answer": "Frank",
        "explanation": "*Candid* means open and honest, i.e. **frank**.",
        "sub_topic": "Synonyms & Antonyms",
    },
    {
        "question": "Choose the correct meaning of the idiom 'to break the ice'.",
        "options": ["To start a conversation", "To cause trouble", "To end a friendship", "To win easily"],
        "correct_answer": "To start a conversation",
        "explanation": "The idiom means easing initial awkwardness by starting a conversation.",
        "sub_topic": "Idioms & Phrases",
    },
    {
        "question": "Sales were 120, 150 and 180 units in three months. What is the average monthly sale?",
        "options": ["140", "145", "150", "155"],
        "correct_answer": "150",
        "explanation": "`(120 + 150 + 180) / 3 = 150`.",
        "sub_topic": "Tables",
    },
]

_TECHNICAL_BANK: list[str] = [
    "Walk me through a project you built end to end. What were the key technical decisions and why did you make them?",
    "How would you design a URL shortening service? Describe the data model and how it scales.",
    "Explain the difference between a process and a thread, and when you would prefer one over the other.",
    "How do you find and fix a performance bottleneck in an application you did not write?",
    "What happens, step by step, when you type a URL into the browser and press enter?",
    "How do you make sure the code you ship is correct? Describe your approach to testing.",
    "Explain how indexes work in a relational database and the trade-offs of adding one.",
    "Describe a bug that was hard to track down. How did you isolate the root cause?",
]

_HR_BANK: list[str] = [
    "Tell me about yourself and what draws you to this role.",
    "Describe a time you disagreed with a teammate. How did you resolve it?",
    "Tell me about a situation where you had to meet a tight deadline. What did you do?",
    "Describe a failure you experienced and what you learned from it.",
    "Give an example of a time you took the lead on something without being asked.",
    "Where do you see yourself in five years, and how does this role fit into that plan?",
    "How do you handle feedback that you disagree with?",
    "What motivates you to do your best work?",
]


def get_static_aptitude_questions(count: int, sub_topics: list[str] | None = None) -> list[AptitudeQuestion]:
    """Return up to ``count`` generic aptitude questions, preferring the requested sub-topics."""
    wanted = max(1, count)
    matching = [item for item in _APTITUDE_BANK if sub_topics and item["sub_topic"] in sub_topics]
    others = [item for item in _APTITUDE_BANK if item not in matching]
    picked = random.sample(matching, k=min(len(matching), wanted))
    picked += random.sample(others, k=min(len(others), wanted - len(picked)))
    return [AptitudeQuestion.model_validate(item) for item in picked]


def get_static_technical_questions(count: int) -> list[str]:
    return _TECHNICAL_BANK[: max(1, count)]


def get_static_hr_questions(count: int) -> list[str]:
    return _HR_BANK[: max(1, count)]
