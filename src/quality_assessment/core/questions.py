"""Quick Quality Assessment question bank.

Version 1.0 contains 27 yes/no questions across 5 categories:

    daily_sessions       session organisation, trial counts, goal implementation (7)
    treatment_fidelity   protocol adherence and behaviour skills training (5)
    data_analysis        data review and intervention effectiveness (5)
    caregiver_guidance   caregiver involvement and communication (6)
    supervision          supervision quality, frequency, and alignment (4)

Question ids are stable and never renumbered. A reworded question gets a new
id and the old one is marked with ``version_deprecated`` and ``replaced_by``.
New versions are added to ``CATALOGS``; each is validated at import time.
"""

from quality_assessment.core.catalog import Catalog, Category, Question, SurveyVersion
from quality_assessment.errors import UnknownSurveyVersionError

CURRENT_VERSION: str = "1.0"

CATEGORIES_V1_0: tuple[Category, ...] = (
    Category(
        id="daily_sessions",
        name="Daily Sessions",
        short_name="Sessions",
        description="Evaluate session organization, trial counts, and goal implementation",
        max_score=7,
    ),
    Category(
        id="treatment_fidelity",
        name="Treatment Fidelity",
        short_name="Fidelity",
        description="Assess adherence to treatment protocols and behavior skills training",
        max_score=5,
    ),
    Category(
        id="data_analysis",
        name="Data Analysis",
        short_name="Data",
        description="Review data monitoring and intervention effectiveness practices",
        max_score=5,
    ),
    Category(
        id="caregiver_guidance",
        name="Caregiver Guidance",
        short_name="Caregiver",
        description="Evaluate caregiver involvement and communication processes",
        max_score=6,
    ),
    Category(
        id="supervision",
        name="Supervision",
        short_name="Supervision",
        description="Assess supervision quality, frequency, and clinical alignment",
        max_score=4,
    ),
)

QUESTIONS_V1_0: tuple[Question, ...] = (
    # -----------------------------------------------------------------------
    # Category: daily_sessions (7 questions)
    # -----------------------------------------------------------------------
    Question(
        id="ds_001",
        category_id="daily_sessions",
        text="Area is organized and necessary materials are readily available consistently",
        version_added="1.0",
    ),
    Question(
        id="ds_002",
        category_id="daily_sessions",
        text="Trial count per hour is at least 50 trials on average",
        version_added="1.0",
    ),
    Question(
        id="ds_003",
        category_id="daily_sessions",
        text="Each goal opened is run to trial criterion (e.g., 10)",
        version_added="1.0",
    ),
    Question(
        id="ds_004",
        category_id="daily_sessions",
        text="Each goal is implemented at least once a session",
        version_added="1.0",
    ),
    Question(
        id="ds_005",
        category_id="daily_sessions",
        text="Preference assessments are completed at least once a week",
        version_added="1.0",
    ),
    Question(
        id="ds_006",
        category_id="daily_sessions",
        text=(
            "The SD, prompting strategy, reinforcement schedules, and target lists "
            "are available for all open goals"
        ),
        version_added="1.0",
    ),
    Question(
        id="ds_007",
        category_id="daily_sessions",
        text=(
            "All BT/RBTs are familiar with all the goals and with the client "
            "on a consistent basis"
        ),
        version_added="1.0",
    ),
    # -----------------------------------------------------------------------
    # Category: treatment_fidelity (5 questions)
    # -----------------------------------------------------------------------
    Question(
        id="tf_001",
        category_id="treatment_fidelity",
        text=(
            "Fidelity checks for skill acquisition goals are implemented "
            "at least every two weeks"
        ),
        version_added="1.0",
    ),
    Question(
        id="tf_002",
        category_id="treatment_fidelity",
        text="All new goals are introduced using Behavior Skills Training (BST) with BT/RBTs",
        version_added="1.0",
    ),
    Question(
        id="tf_003",
        category_id="treatment_fidelity",
        text=(
            "Challenging behavior targets have treatment fidelity checklists for each "
            "component of the behavior plan (e.g., NCR, DRO, FCT)"
        ),
        version_added="1.0",
    ),
    Question(
        id="tf_004",
        category_id="treatment_fidelity",
        text="The implementation of the behavior plan is presented utilizing BST",
        version_added="1.0",
    ),
    Question(
        id="tf_005",
        category_id="treatment_fidelity",
        text=(
            "The implementation of the behavior intervention plan is monitored with "
            "treatment fidelity checklists at least twice a month"
        ),
        version_added="1.0",
    ),
    # -----------------------------------------------------------------------
    # Category: data_analysis (5 questions)
    # -----------------------------------------------------------------------
    Question(
        id="da_001",
        category_id="data_analysis",
        text=(
            "There is a standardized approach to ensure that all clinicians review "
            "skill acquisition data every 10 sessions"
        ),
        version_added="1.0",
    ),
    Question(
        id="da_002",
        category_id="data_analysis",
        text=(
            "There is a standardized approach for BT/RBTs to alert their supervisors "
            "of a problematic goal"
        ),
        version_added="1.0",
    ),
    Question(
        id="da_003",
        category_id="data_analysis",
        text=(
            "The percentage of goals mastered for current treatment plan goals are "
            "monitored as an organization metric; goals that continue into the next "
            "authorization period have had any barriers identified, resolved, and "
            "have had protocols modified"
        ),
        version_added="1.0",
    ),
    Question(
        id="da_004",
        category_id="data_analysis",
        text=(
            "There is a standardized way to determine the effectiveness of "
            "challenging behavior interventions"
        ),
        version_added="1.0",
    ),
    Question(
        id="da_005",
        category_id="data_analysis",
        text=(
            "The interventions selected for challenging behavior have reduced "
            "challenging behavior to a desired level"
        ),
        version_added="1.0",
    ),
    # -----------------------------------------------------------------------
    # Category: caregiver_guidance (6 questions)
    # -----------------------------------------------------------------------
    Question(
        id="cg_001",
        category_id="caregiver_guidance",
        text="Caregiver guidance happens at least once a month",
        version_added="1.0",
    ),
    Question(
        id="cg_002",
        category_id="caregiver_guidance",
        text="There is good adherence to caregiver goals",
        version_added="1.0",
    ),
    Question(
        id="cg_003",
        category_id="caregiver_guidance",
        text="The agency conducts caregiver satisfaction surveys every six months",
        version_added="1.0",
    ),
    Question(
        id="cg_004",
        category_id="caregiver_guidance",
        text=(
            "The agency has a structured monthly update interview form to review "
            "items such as medication changes with caregivers"
        ),
        version_added="1.0",
    ),
    Question(
        id="cg_005",
        category_id="caregiver_guidance",
        text=(
            "The initial caregiver interview includes an area for caregivers "
            "to express their concerns"
        ),
        version_added="1.0",
    ),
    Question(
        id="cg_006",
        category_id="caregiver_guidance",
        text=(
            "The initial assessment and the 6-month reassessment include a "
            "quality of life measure"
        ),
        version_added="1.0",
    ),
    # -----------------------------------------------------------------------
    # Category: supervision (4 questions)
    # -----------------------------------------------------------------------
    Question(
        id="sup_001",
        category_id="supervision",
        text="BCBAs arrive to supervision sessions with a structured plan",
        version_added="1.0",
    ),
    Question(
        id="sup_002",
        category_id="supervision",
        text="Supervision sessions involve BST with BT/RBTs",
        version_added="1.0",
    ),
    Question(
        id="sup_003",
        category_id="supervision",
        text="Supervision happens at least twice a month",
        version_added="1.0",
    ),
    Question(
        id="sup_004",
        category_id="supervision",
        text="The percentage of supervision is in alignment with what is clinically necessary",
        version_added="1.0",
    ),
)

VERSION_1_0: SurveyVersion = SurveyVersion(
    version="1.0",
    released_at="2026-01-15",
    question_ids=tuple(question.id for question in QUESTIONS_V1_0),
    max_score=len(QUESTIONS_V1_0),
    changelog="Initial release with 27 questions across 5 categories",
)

# Registered catalogs by version string. Validation runs once at import.
CATALOGS: dict[str, Catalog] = {
    VERSION_1_0.version: Catalog(
        version=VERSION_1_0,
        categories=CATEGORIES_V1_0,
        questions=QUESTIONS_V1_0,
    ).validate(),
}


def get_catalog(version: str = CURRENT_VERSION) -> Catalog:
    """Return the validated catalog for a survey version.

    Args:
        version: Survey version string (e.g. '1.0').

    Returns:
        The immutable Catalog for that version.

    Raises:
        UnknownSurveyVersionError: If no catalog is registered for the version.
    """
    catalog = CATALOGS.get(version)
    if catalog is None:
        raise UnknownSurveyVersionError(version)
    return catalog


def available_versions() -> list[str]:
    """Return all registered survey versions, oldest first."""
    return sorted(CATALOGS, key=lambda v: tuple(int(part) for part in v.split(".")))
