"""
Recommendation Engine.
Picks the headline issues for the executive summary and the closing
next steps for a rating band.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from wpaudit.core.logging import get_logger
from wpaudit.models import CategoryAnalyses, Rating

logger = get_logger(__name__)

MAX_TOP_ISSUES = 5

# (category, how many issues it contributes), in display order
TOP_ISSUE_QUOTAS = (
    ("security", 2),
    ("performance", 2),
    ("seo", 1),
    ("modernization", 1),
)

NEXT_STEPS: Dict[Rating, str] = {
    Rating.HEALTHY: (
        "Your WordPress site is in good shape! Focus on:\n"
        "- Continue monitoring and optimizing performance\n"
        "- Keep WordPress core and plugins updated\n"
        "- Consider implementing a headless architecture for enhanced scalability\n"
        "\n"
        "This site is well-maintained and ready for targeted enhancements."
    ),
    Rating.NEEDS_OPTIMIZATION: (
        "Your site has a solid foundation but needs optimization:\n"
        "- Address the critical issues identified above\n"
        "- Implement recommended security headers\n"
        "- Optimize images and reduce JavaScript payload\n"
        "- Consider modernization for long-term performance gains\n"
        "\n"
        "With focused improvements, this site can achieve excellent scores."
    ),
    Rating.NEEDS_MODERNIZATION: (
        "Your site shows significant opportunities for modernization:\n"
        "- Address security vulnerabilities immediately\n"
        "- Enable and configure WordPress REST API\n"
        "- Migrate to pretty permalinks\n"
        "- Implement CDN for static assets\n"
        "- Consider a phased migration to a modern architecture (Next.js + headless CMS)\n"
        "\n"
        "This site would benefit greatly from strategic modernization."
    ),
    Rating.LEGACY: (
        "Your site is in a legacy state and strongly needs modernization:\n"
        "- **URGENT:** Migrate to HTTPS if not already done\n"
        "- Implement critical security headers\n"
        "- Enable WordPress REST API\n"
        "- Update WordPress core and plugins\n"
        "- Plan a comprehensive modernization strategy\n"
        "\n"
        "We strongly recommend consulting with a web development team to plan "
        "a migration to a modern stack."
    ),
}


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class TopIssue:
    """A headline issue for the executive summary."""
    category: str
    text: str
    priority: Priority

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "issue": self.text, "priority": self.priority.value}


class RecommendationEngine:
    """Selects and prioritizes the issues surfaced at the top of a report."""

    def _priority(self, category: str, text: str) -> Priority:
        if category == "security" and "HTTPS" in text:
            return Priority.CRITICAL
        if category == "security":
            return Priority.HIGH
        return Priority.MEDIUM

    def top_issues(self, analyses: CategoryAnalyses) -> List[TopIssue]:
        """Security first, then performance, SEO and modernization."""
        selected: List[TopIssue] = []
        for category, quota in TOP_ISSUE_QUOTAS:
            for text in getattr(analyses, category).issues[:quota]:
                selected.append(TopIssue(category=category, text=text, priority=self._priority(category, text)))
        logger.debug("Selected top issues", count=len(selected[:MAX_TOP_ISSUES]))
        return selected[:MAX_TOP_ISSUES]

    def next_steps(self, rating: Rating) -> str:
        return NEXT_STEPS.get(
            rating,
            "Review the recommendations above and prioritize based on your business needs.",
        )
