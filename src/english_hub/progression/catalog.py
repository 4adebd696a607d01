"""Static gamification tables: XP values, badges and mission templates."""

from pydantic import BaseModel

from english_hub.models.progress import MissionType

XP_PER_LEVEL = 1000

VOCAB_CORRECT_XP = 15
READING_MCQ_CORRECT_XP = 20
READING_OPEN_CORRECT_XP = 40
WRITING_SUBMIT_XP = 75
DAILY_MISSION_BONUS_XP = 50

QUIZ_LENGTH = 10


class Badge(BaseModel, frozen=True):
    """Achievement definition. Never mutated at runtime."""

    id: str
    name: str
    description: str
    icon: str


class MissionTemplate(BaseModel, frozen=True):
    type: MissionType
    target: int
    description: str


# Catalog order is the order newly unlocked badges are reported in.
BADGES: tuple[Badge, ...] = (
    Badge(id="first_steps", name="First Steps",
          description="Complete your first activity.", icon="👟"),
    Badge(id="vocab_wiz_1", name="Vocabulary Wizard I",
          description="Answer 10 vocabulary questions correctly.", icon="🧙"),
    Badge(id="vocab_wiz_2", name="Vocabulary Wizard II",
          description="Answer 50 vocabulary questions correctly.", icon="🧙‍♂️"),
    Badge(id="word_smith_1", name="Word Smith I",
          description="Get feedback on your first essay.", icon="✍️"),
    Badge(id="word_smith_2", name="Word Smith II",
          description="Get feedback on 5 essays.", icon="✍️"),
    Badge(id="bookworm_1", name="Bookworm I",
          description="Complete 3 reading quizzes.", icon="🐛"),
    Badge(id="bookworm_2", name="Bookworm II",
          description="Complete 10 reading quizzes.", icon="🦋"),
    Badge(id="dedicated_learner", name="Dedicated Learner",
          description="Log in 3 days in a row.", icon="🗓️"),
    Badge(id="committed_learner", name="Committed Learner",
          description="Reach a 7-day login streak.", icon="🔥"),
    Badge(id="sharp_shooter", name="Sharp Shooter",
          description="Get a perfect score on any quiz.", icon="🎯"),
    Badge(id="polymath", name="Polymath",
          description="Complete an activity in all three categories.", icon="🎓"),
    Badge(id="unstoppable", name="Unstoppable",
          description="Reach level 5.", icon="🚀"),
)

BADGES_BY_ID: dict[str, Badge] = {badge.id: badge for badge in BADGES}

MISSION_TEMPLATES: tuple[MissionTemplate, ...] = (
    MissionTemplate(
        type=MissionType.VOCAB_CORRECT,
        target=10,
        description="Answer 10 vocabulary questions correctly.",
    ),
    MissionTemplate(
        type=MissionType.EARN_XP,
        target=100,
        description="Earn 100 XP.",
    ),
    MissionTemplate(
        type=MissionType.COMPLETE_READING,
        target=1,
        description="Complete 1 reading quiz.",
    ),
)


def level_for_xp(xp: int) -> int:
    """Level is derived from total XP and never set directly."""
    return xp // XP_PER_LEVEL + 1
