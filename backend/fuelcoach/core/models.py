"""Core Data Models - Pydantic models for type safety.

Stored rows (Profile, Meal, Workout, WeighIn, Insight) are
validated on the way in from the store. Everything below the "Derived"
marker is recomputed on every read and never persisted.
"""

from datetime import datetime
from datetime import date as DateType
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field
import uuid


class Goal(str, Enum):
    """Direction the user is steering body weight."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class MealTime(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class WorkoutType(str, Enum):
    CARDIO = "cardio"
    STRENGTH = "strength"


class InsightCategory(str, Enum):
    PATTERN = "pattern"
    PREFERENCE = "preference"
    CONSTRAINT = "constraint"
    GOAL_CONTEXT = "goal_context"


class ProgressState(str, Enum):
    """Momentary read of today's live progress, used to pick coaching tone."""

    VICTORY = "victory"
    ALMOST = "almost"
    ON_TRACK = "on-track"
    STRUGGLING = "struggling"
    FRESH_START = "fresh-start"


class Profile(BaseModel):
    """A tracked user's targets and goal metadata."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = None
    height_inches: Optional[float] = Field(default=None, gt=0)
    start_weight: Optional[float] = Field(default=None, gt=0, description="Starting weight in pounds")
    goal_weight: Optional[float] = Field(default=None, gt=0, description="Goal weight in pounds")
    start_bf: Optional[float] = Field(default=None, ge=0, le=100)
    goal_bf: Optional[float] = Field(default=None, ge=0, le=100)
    daily_calories: Optional[int] = Field(default=None, ge=0, description="Daily calorie target")
    daily_protein: Optional[int] = Field(default=None, ge=0, description="Daily protein target in grams")
    daily_carbs: Optional[int] = Field(default=None, ge=0, description="Daily carbohydrate target in grams")
    daily_fat: Optional[int] = Field(default=None, ge=0, description="Daily fat target in grams")
    goal: Optional[Goal] = Field(default=None, description="None means fall back to coaching_notes")
    coaching_notes: Optional[str] = Field(default=None, description="Free text from the user")
    start_date: Optional[DateType] = None
    timezone: Optional[str] = Field(default=None, description="IANA zone used to resolve 'today'")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Meal(BaseModel):
    """A food item logged against a local calendar date."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    profile_id: str
    date: DateType = Field(description="Local calendar date (YYYY-MM-DD)")
    name: str = Field(min_length=1, description="Name/description of the meal")
    time_of_day: Optional[MealTime] = None
    calories: Optional[float] = Field(default=None, ge=0)
    protein: Optional[float] = Field(default=None, ge=0, description="Protein in grams")
    carbs: Optional[float] = Field(default=None, ge=0, description="Carbohydrates in grams")
    fat: Optional[float] = Field(default=None, ge=0, description="Fat in grams")
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Workout(BaseModel):
    """A workout or exercise session."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    profile_id: str
    date: DateType
    type: Optional[WorkoutType] = None
    exercise: Optional[str] = None
    duration_minutes: Optional[float] = Field(default=None, ge=0)
    rpe: Optional[int] = Field(default=None, ge=1, le=10, description="Rate of perceived exertion")
    sets: Optional[int] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None
    calories_burned: Optional[float] = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class WeighIn(BaseModel):
    """One weigh-in per profile per date."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    profile_id: str
    date: DateType
    weight: float = Field(gt=0, description="Weight in pounds")
    body_fat: Optional[float] = Field(default=None, ge=0, le=100)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Insight(BaseModel):
    """A remembered fact about the user, written by the model."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    profile_id: str
    category: InsightCategory
    insight: str = Field(min_length=1)
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# ==================== Derived ====================


class DayTotals(BaseModel):
    """Summed macros for one date."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class Targets(BaseModel):
    """Daily targets with defaults already substituted."""

    calories: int
    protein: int
    carbs: int
    fat: int


class TargetEvaluation(BaseModel):
    hit_calories: bool
    hit_protein: bool
    hit_both: bool


class DailySnapshot(BaseModel):
    """Per-day aggregate, rebuilt from logged rows on every read."""

    date: DateType
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
    target_calories: int
    target_protein: int
    hit_calorie_target: bool = False
    hit_protein_target: bool = False
    hit_both_targets: bool = False
    meals: list[Meal] = Field(default_factory=list)
    workouts: list[Workout] = Field(default_factory=list)


class StreakState(BaseModel):
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)


class WeeklyAverages(BaseModel):
    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0


class Consistency(BaseModel):
    days_hit_calories: int = 0
    days_hit_protein: int = 0
    days_hit_both: int = 0
    workout_count: int = 0
    days_tracked: int = 0


class WeeklySnapshot(BaseModel):
    """Rolling window of tracked days, excluding today."""

    days: list[DailySnapshot] = Field(default_factory=list)
    averages: WeeklyAverages = Field(default_factory=WeeklyAverages)
    consistency: Consistency = Field(default_factory=Consistency)
    patterns: list[str] = Field(default_factory=list)


class MealsLogged(BaseModel):
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False
    snacks: int = 0


class TodayStatus(BaseModel):
    """Live view of today used by the prompt and the progress classifier."""

    date: DateType
    hour: int = Field(ge=0, le=23)
    time_of_day: Literal["morning", "afternoon", "evening", "night"]
    meals: list[Meal] = Field(default_factory=list)
    workouts: list[Workout] = Field(default_factory=list)
    totals: DayTotals = Field(default_factory=DayTotals)
    remaining_calories: float
    remaining_protein: float
    meals_remaining: int
    meals_logged: MealsLogged = Field(default_factory=MealsLogged)
    calories_burned: float = 0
    workout_credit: int = Field(default=0, description="Share of burned calories added back to the budget")


class CoachingContext(BaseModel):
    """Everything the system prompt is rendered from."""

    profile: Profile
    name: str
    goal: Goal
    targets: Targets
    today: TodayStatus
    yesterday: DailySnapshot
    last_week: WeeklySnapshot
    streak: int = 0
    progress_state: ProgressState
    coaching_tips: list[str] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    latest_weigh_in: Optional[WeighIn] = None


class HeroStats(BaseModel):
    """Headline numbers for the dashboard."""

    current_streak: int
    best_streak: int
    days_active: int
    total_weight_change: Optional[float] = Field(default=None, description="Negative means weight lost")
    weight_to_goal: Optional[float] = None
    weekly_avg_calories: Optional[int] = None
    weekly_avg_protein: Optional[int] = None


class DailyLogReport(BaseModel):
    """Everything logged for a single date."""

    date: DateType
    meals: list[Meal]
    workouts: list[Workout]
    weigh_in: Optional[WeighIn] = None
    totals: DayTotals


class DateRangeSummary(BaseModel):
    start_date: DateType
    end_date: DateType
    days_tracked: int
    avg_daily_calories: int
    avg_daily_protein: int
    workout_count: int
    weight_change: Optional[float] = Field(default=None, description="Last minus first weigh-in in range")
