"""
AI generation wrapper around the OpenAI chat-completions API.

Both operations never raise: when the call fails, or returns something that
is not the expected JSON, a static payload is returned instead. The result is
tagged with ``source`` so callers can tell the two apart.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Sequence

import openai

from academia.core.config import Settings

logger = logging.getLogger(__name__)

RECOMMENDATION_SYSTEM_PROMPT = (
    "You are an academic advisor helping students choose appropriate courses. "
    "Provide practical, relevant course recommendations based on their interests and academic level."
)

SYLLABUS_SYSTEM_PROMPT = (
    "You are an experienced university professor creating detailed course syllabi. "
    "Ensure academic rigor and practical learning outcomes."
)


@dataclass
class AIResult:
    source: Literal["generated", "fallback"]
    data: Dict[str, Any]

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


def fallback_recommendations() -> Dict[str, Any]:
    return {
        "recommendations": [
            {
                "title": "Introduction to Computer Science",
                "code": "CS101",
                "description": "Fundamental concepts of programming and computational thinking",
                "credits": 3,
                "matchPercentage": 85,
                "reasoning": "Great foundation course for technical interests",
            },
            {
                "title": "Data Structures and Algorithms",
                "code": "CS201",
                "description": "Essential data structures and algorithmic problem solving",
                "credits": 4,
                "matchPercentage": 90,
                "reasoning": "Builds on programming fundamentals with practical applications",
            },
        ]
    }


def fallback_syllabus(title: str, description: str, duration: int, credits: int) -> Dict[str, Any]:
    weekly_schedule = []
    for i in range(duration):
        week: Dict[str, Any] = {
            "week": i + 1,
            "topic": f"Week {i + 1}: Introduction to Course Topic {i + 1}",
            "activities": ["Lecture", "Discussion", "Lab Work"],
        }
        if i % 4 == 3:
            week["assignments"] = "Assignment due"
        weekly_schedule.append(week)

    return {
        "syllabus": {
            "courseInfo": {
                "title": title,
                "description": description,
                "credits": credits,
                "duration": f"{duration} weeks",
            },
            "learningObjectives": [
                "Understand fundamental concepts",
                "Apply theoretical knowledge to practical problems",
                "Develop critical thinking skills",
                "Demonstrate proficiency in course materials",
            ],
            "weeklySchedule": weekly_schedule,
            "assessments": [
                {"type": "Assignments", "weight": 40, "description": "Regular homework and projects"},
                {"type": "Midterm Exam", "weight": 25, "description": "Comprehensive midterm examination"},
                {"type": "Final Exam", "weight": 35, "description": "Cumulative final examination"},
            ],
            "resources": [
                "Course textbook (TBD)",
                "Online learning platform",
                "Supplementary readings",
            ],
            "policies": [
                "Regular attendance is expected",
                "Late submissions will be penalized",
                "Academic integrity must be maintained",
                "Office hours available by appointment",
            ],
        }
    }


def _recommendation_prompt(interests: str, level: str, existing_courses: Sequence[str]) -> str:
    return f"""Based on the following academic interests and preferences, recommend 3-5 relevant university courses:

Academic Interests: {interests}
Preferred Level: {level}
Already Enrolled: {", ".join(existing_courses) or "None"}

Please provide course recommendations in JSON format with the following structure:
{{
  "recommendations": [
    {{
      "title": "Course Title",
      "code": "DEPT###",
      "description": "Brief course description",
      "credits": 3,
      "matchPercentage": 95,
      "reasoning": "Why this course matches the student's interests"
    }}
  ]
}}

Focus on courses that align with the student's interests and avoid duplicating their existing enrollments."""


def _syllabus_prompt(title: str, description: str, duration: int, credits: int) -> str:
    return f"""Create a comprehensive university course syllabus for:

Course Title: {title}
Course Description: {description}
Duration: {duration} weeks
Credits: {credits}

Generate a detailed syllabus in JSON format with the following structure:
{{
  "syllabus": {{
    "courseInfo": {{
      "title": "Course Title",
      "description": "Course description",
      "credits": 3,
      "duration": "16 weeks"
    }},
    "learningObjectives": ["Objective 1", "Objective 2"],
    "weeklySchedule": [
      {{
        "week": 1,
        "topic": "Week topic",
        "activities": ["Activity 1", "Activity 2"],
        "assignments": "Optional assignment description"
      }}
    ],
    "assessments": [
      {{
        "type": "Midterm Exam",
        "weight": 30,
        "description": "Assessment description"
      }}
    ],
    "resources": ["Required textbook", "Online materials"],
    "policies": ["Attendance policy", "Late submission policy"]
  }}
}}

Make the syllabus comprehensive, academically rigorous, and appropriate for university level."""


class AIService:
    def __init__(self, client: Optional[Any], model: str = "gpt-4o"):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "AIService":
        if not settings.OPENAI_API_KEY:
            logger.warning("OPENAI_API_KEY not set; AI features will return fallback payloads")
            return cls(None, settings.OPENAI_MODEL)
        client = openai.OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
        )
        return cls(client, settings.OPENAI_MODEL)

    def _complete_json(self, system_prompt: str, prompt: str, max_tokens: int, required_key: str) -> Dict[str, Any]:
        if self.client is None:
            raise RuntimeError("no OpenAI client configured")

        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
        )
        content = response.choices[0].message.content
        if not content:
            raise ValueError("empty completion")

        result = json.loads(content)
        if not isinstance(result, dict) or required_key not in result:
            raise ValueError(f"completion is missing '{required_key}'")
        return result

    def generate_course_recommendations(
        self,
        interests: str,
        level: str = "any",
        existing_courses: Sequence[str] = (),
    ) -> AIResult:
        prompt = _recommendation_prompt(interests, level, existing_courses)
        try:
            data = self._complete_json(RECOMMENDATION_SYSTEM_PROMPT, prompt, 1000, "recommendations")
        except Exception as e:
            logger.warning("AI recommendation error, using fallback: %s", e)
            return AIResult("fallback", fallback_recommendations())
        return AIResult("generated", data)

    def generate_syllabus(self, title: str, description: str, duration: int, credits: int) -> AIResult:
        prompt = _syllabus_prompt(title, description, duration, credits)
        try:
            data = self._complete_json(SYLLABUS_SYSTEM_PROMPT, prompt, 2000, "syllabus")
        except Exception as e:
            logger.warning("AI syllabus generation error, using fallback: %s", e)
            return AIResult("fallback", fallback_syllabus(title, description, duration, credits))
        return AIResult("generated", data)
