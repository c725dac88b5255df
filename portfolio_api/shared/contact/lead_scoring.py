"""Lead scoring and priority triage for contact inquiries."""

from typing import Dict

from portfolio_api.shared.contact.schemas import (
    BudgetRange,
    ContactFormData,
    InquiryPriority,
    ProjectType,
    Timeline,
)


BASE_SCORE = 50

PROJECT_TYPE_POINTS: Dict[ProjectType, int] = {
    ProjectType.CUSTOM: 25,
    ProjectType.STANDARD: 20,
    ProjectType.E_COMMERCE: 15,
    ProjectType.LANDING: 10,
}
PROJECT_TYPE_DEFAULT_POINTS = 5

BUDGET_POINTS: Dict[BudgetRange, int] = {
    BudgetRange.OVER_50000: 20,
    BudgetRange.FROM_25000_TO_50000: 15,
    BudgetRange.FROM_10000_TO_25000: 10,
    BudgetRange.FROM_5000_TO_10000: 5,
}
BUDGET_DEFAULT_POINTS = 2

TIMELINE_POINTS: Dict[Timeline, int] = {
    Timeline.ASAP: 10,
    Timeline.ONE_MONTH: 8,
    Timeline.TWO_TO_THREE_MONTHS: 5,
}
TIMELINE_DEFAULT_POINTS = 2

HIGH_BUDGETS = (BudgetRange.OVER_50000, BudgetRange.FROM_25000_TO_50000)


def calculate_lead_score(form: ContactFormData) -> int:
    """
    Deterministic 0-100 estimate of how valuable an inquiry is.

    Starts at BASE_SCORE and adds points for project type, budget, timeline,
    company and phone details, message length and marketing consent.
    """
    score = BASE_SCORE
    score += PROJECT_TYPE_POINTS.get(form.project_type, PROJECT_TYPE_DEFAULT_POINTS)
    score += BUDGET_POINTS.get(form.budget, BUDGET_DEFAULT_POINTS)
    score += TIMELINE_POINTS.get(form.timeline, TIMELINE_DEFAULT_POINTS)

    if form.company and form.company.strip():
        score += 10
    if form.phone and form.phone.strip():
        score += 5

    if len(form.message) > 200:
        score += 10
    elif len(form.message) > 100:
        score += 5

    if form.marketing_consent:
        score += 5

    return max(0, min(100, score))


def determine_priority(lead_score: int, form: ContactFormData) -> InquiryPriority:
    # Checked in order; the first matching tier wins
    if lead_score >= 80 or form.timeline == Timeline.ASAP:
        return InquiryPriority.URGENT
    if lead_score >= 65 or form.budget in HIGH_BUDGETS:
        return InquiryPriority.HIGH
    if lead_score >= 50:
        return InquiryPriority.MEDIUM
    return InquiryPriority.LOW
