import random
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

# Description tokens that already imply a group; such activities are left as-is in multiplayer mode.
GROUP_TOKENS = ("people", "friends", "partners", "together")


class Activity(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)


class ActivityResult(BaseModel):
    success: bool = True
    activity: Optional[Activity] = None
    # Soft tag for observability; callers may ignore it.
    error: Optional[str] = None


# Used by the activity source when generation is unavailable or fails.
SOURCE_FALLBACKS = (
    Activity(
        title="Reverse Order Day",
        description=(
            "Do your normal routine completely backwards today. Start with dinner foods for breakfast, "
            "say goodbye when meeting people, and end your day with a morning ritual."
        ),
    ),
    Activity(
        title="Random Accent Hour",
        description=(
            "Speak in a made-up accent for one hour in public. Commit fully to the character and see "
            "how people respond differently to you."
        ),
    ),
    Activity(
        title="Five Compliments Challenge",
        description=(
            "Give five genuine compliments to complete strangers today. Notice how it makes you feel "
            "and how they react to unexpected kindness."
        ),
    ),
)

# Used by the interaction controller after repeated failures.
CONTROLLER_FALLBACKS = (
    Activity(
        title="High Five a Stranger",
        description=(
            "Find a friendly-looking stranger in a public place and offer them a high five. "
            "Smile and say 'Happy Tuesday!' (or whatever day it is)."
        ),
    ),
    Activity(
        title="Explore a New Building",
        description=(
            "Walk into a building you've never been in before. It could be a hotel lobby, a university "
            "building, or an office tower. Spend 10 minutes exploring and notice three interesting details."
        ),
    ),
    Activity(
        title="Random Bus Adventure",
        description=(
            "Get on the next bus that arrives at your nearest stop. Ride for 3 stops, get off, "
            "and find something interesting in that neighborhood."
        ),
    ),
    Activity(
        title="Compliment Chain",
        description=(
            "Give genuine compliments to three strangers in a row. Notice how it makes you feel "
            "and how they react."
        ),
    ),
    Activity(
        title="Reverse Shopping",
        description=(
            "Go to a store and ask an employee to recommend their favorite item under $10. "
            "Buy it without questioning their choice."
        ),
    ),
)

LAST_RESORT_ACTIVITY = Activity(
    title="Street Performance",
    description=(
        "Find a busy public area and perform a simple talent for 2 minutes. It could be singing, dancing, "
        "or even reciting a poem. Notice how it feels to be watched by strangers."
    ),
)

RandomIndex = Callable[[int], int]


def default_random_index(n: int) -> int:
    return random.randrange(n)


def pick_random(pool: Sequence[Activity], random_index: Optional[RandomIndex] = None) -> Activity:
    """Pick one activity from a static pool.

    The index function is injectable so callers (and tests) can pin the choice.
    An out-of-range index raises IndexError rather than silently wrapping.
    """
    if not pool:
        raise ValueError("cannot pick from an empty activity pool")
    chooser = random_index or default_random_index
    idx = chooser(len(pool))
    if idx < 0 or idx >= len(pool):
        raise IndexError(f"random index {idx} out of range for pool of {len(pool)}")
    return pool[idx]


def mentions_group(description: str) -> bool:
    lowered = description.lower()
    return any(token in lowered for token in GROUP_TOKENS)


def apply_multiplayer_prefix(activity: Activity, player_count: int) -> Activity:
    """Return a copy whose description is prefixed with the player count.

    Descriptions that already talk about a group are returned unchanged.
    """
    if player_count <= 1 or mentions_group(activity.description):
        return activity
    return activity.model_copy(update={"description": f"With {player_count} people: {activity.description}"})


def share_text(activity: Activity) -> str:
    return f'Try this spontaneous activity: "{activity.title}" - {activity.description}'
