"""Productivity insights using the OpenAI SDK with the Gemini API."""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from openai import OpenAI

from ..config import Settings
from ..models import TaskStatus
from ..schemas.task import TaskStatistics
from .normalizer import canonicalize

logger = logging.getLogger(__name__)

FALLBACK_INSIGHT = (
    "Insights are unavailable right now. Your tasks are safe; "
    "try again in a little while."
)

# --- SYSTEM PROMPT ---
SYSTEM_PROMPT = """You are a productivity coach. You read a user's task list and
give practical, encouraging advice. Reference actual task titles when making
recommendations. Format the answer as markdown with these sections:

## Overall Assessment
## What's Working Well
## Areas for Improvement
## Task-Specific Recommendations
## Productivity Tips
"""


def compute_statistics(tasks: List[Dict[str, Any]]) -> TaskStatistics:
    """Count tasks per status for canonical task views."""
    total = len(tasks)
    done = sum(1 for t in tasks if t["status"] == TaskStatus.DONE.value)
    in_progress = sum(1 for t in tasks if t["status"] == TaskStatus.IN_PROGRESS.value)
    pending = sum(1 for t in tasks if t["status"] == TaskStatus.PENDING.value)
    return TaskStatistics(
        total_tasks=total,
        completed_tasks=done,
        in_progress_tasks=in_progress,
        pending_tasks=pending,
        completion_rate=round(done / total * 100) if total else 0,
    )


def build_prompt(tasks: List[Dict[str, Any]], stats: TaskStatistics) -> str:
    summary = [
        {
            "title": t["title"],
            "description": t["description"],
            "status": t["status"],
            "priority": t["priority"],
            "dueDate": t["due_date"].isoformat() if t["due_date"] else None,
            "tags": t["tags"],
        }
        for t in tasks
    ]
    return (
        "Analyze these tasks and provide productivity insights and recommendations.\n\n"
        f"Task Data: {json.dumps(summary, indent=2)}\n\n"
        "Current Statistics:\n"
        f"- Total Tasks: {stats.total_tasks}\n"
        f"- Completed: {stats.completed_tasks}\n"
        f"- In Progress: {stats.in_progress_tasks}\n"
        f"- Pending: {stats.pending_tasks}\n"
        f"- Completion Rate: {stats.completion_rate}%\n"
    )


class InsightGenerator:
    """Asks an external model for a productivity summary.

    Never raises for collaborator problems: a missing key, a network error or
    an empty answer all produce ``FALLBACK_INSIGHT``.

    Attributes:
        model: Model name sent with each request
        client: OpenAI-compatible client, or None when no API key is configured
    """

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.model = settings.insights_model
        self.client = client
        if self.client is None and settings.gemini_api_key:
            self.client = OpenAI(
                api_key=settings.gemini_api_key,
                base_url=settings.insights_base_url,
                timeout=settings.insights_timeout,
            )

    def generate(self, owner_id: str, tasks: List[Mapping[str, Any]]) -> Dict[str, Any]:
        """Summarize ``tasks`` for ``owner_id``.

        Returns:
            ``{"insight": str, "statistics": TaskStatistics}``
        """
        views = [canonicalize(t) for t in tasks]
        stats = compute_statistics(views)

        if self.client is None:
            logger.warning("Insights requested but no API key is configured")
            return {"insight": FALLBACK_INSIGHT, "statistics": stats}

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(views, stats)},
                ],
                temperature=0.7,
                max_tokens=1024,
            )
            insight = response.choices[0].message.content
        except Exception:
            logger.exception(f"Insight generation failed for {owner_id}")
            return {"insight": FALLBACK_INSIGHT, "statistics": stats}

        if not insight or not insight.strip():
            logger.warning(f"Insight model returned an empty answer for {owner_id}")
            return {"insight": FALLBACK_INSIGHT, "statistics": stats}
        return {"insight": insight.strip(), "statistics": stats}
