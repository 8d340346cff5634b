"""Firestore Client - Persistence for profiles, logs and coaching memory.

This module handles all database I/O. Business logic lives in the core
package. Read failures are logged and degrade to None or an empty list so
that the coaching context can always be built.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

from google.cloud import firestore

from ..core.models import Insight, Meal, Profile, WeighIn, Workout


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None

    @classmethod
    def from_env(cls) -> "FirestoreConfig":
        return cls(
            project_id=os.environ.get("FIRESTORE_PROJECT") or None,
            database=os.environ.get("FIRESTORE_DATABASE", "fuelcoach"),
        )


def _to_document(model: Any) -> dict:
    """Dump a model for storage, with dates as YYYY-MM-DD strings."""
    data = model.model_dump()
    for key, value in data.items():
        if isinstance(value, date) and not isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, Enum):
            data[key] = value.value
    return data


class CoachStoreClient:
    """Client for persisting coaching data to Firestore.

    Document structure per profile:
        profiles/{profile_id}: { name, daily_calories, goal, timezone, ... }
            meals/{meal_id}: { date, name, calories, ... }
            workouts/{workout_id}: { date, exercise, ... }
            weigh_ins/{YYYY-MM-DD}: { date, weight, body_fat }
            insights/{insight_id}: { category, insight, active, ... }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _profile_ref(self, profile_id: str) -> firestore.DocumentReference:
        return self.client.collection("profiles").document(profile_id)

    def _collection(self, profile_id: str, name: str) -> firestore.CollectionReference:
        return self._profile_ref(profile_id).collection(name)

    def _range_query(
        self, profile_id: str, name: str, start_date: date, end_date: date
    ) -> Iterable[firestore.DocumentSnapshot]:
        return (
            self._collection(profile_id, name)
            .where("date", ">=", start_date.isoformat())
            .where("date", "<=", end_date.isoformat())
            .order_by("date")
            .stream()
        )

    # ==================== Profile Operations ====================

    def fetch_profile(self, profile_id: str) -> Profile | None:
        """Fetch a profile, letting read errors propagate.

        Callers that write the profile back use this so a failed read is
        never mistaken for a missing profile.

        Returns:
            Profile if found, None if no document exists
        """
        logger.debug("Fetching profile: %s", profile_id[:8])
        doc = self._profile_ref(profile_id).get()
        if not doc.exists:
            return None
        return Profile(id=profile_id, **{k: v for k, v in doc.to_dict().items() if k != "id"})

    def get_profile(self, profile_id: str) -> Profile | None:
        """Fetch a profile.

        Args:
            profile_id: The profile's ID

        Returns:
            Profile if found, None if missing or the read failed
        """
        try:
            return self.fetch_profile(profile_id)
        except Exception as e:
            logger.error("Failed to fetch profile: %s", str(e))
            return None

    def save_profile(self, profile: Profile) -> bool:
        """Create or overwrite a profile.

        Returns:
            True if successful
        """
        logger.info("Saving profile: %s", profile.id[:8])
        try:
            self._profile_ref(profile.id).set(_to_document(profile))
            return True
        except Exception as e:
            logger.error("Failed to save profile: %s", str(e))
            return False

    # ==================== Meal Operations ====================

    def list_meals(self, profile_id: str, start_date: date, end_date: date) -> list[Meal]:
        """Fetch meals for an inclusive date range.

        Returns:
            Meals ordered by date then creation time (empty on failure)
        """
        logger.debug("Fetching meals for %s from %s to %s", profile_id[:8], start_date, end_date)
        try:
            meals = [Meal(**doc.to_dict()) for doc in self._range_query(profile_id, "meals", start_date, end_date)]
            meals.sort(key=lambda m: (m.date, m.created_at))
            logger.debug("Found %d meals in range", len(meals))
            return meals
        except Exception as e:
            logger.error("Failed to fetch meals: %s", str(e))
            return []

    def add_meal(self, meal: Meal) -> bool:
        logger.info("Logging meal for %s on %s", meal.profile_id[:8], meal.date)
        try:
            self._collection(meal.profile_id, "meals").document(meal.id).set(_to_document(meal))
            return True
        except Exception as e:
            logger.error("Failed to log meal: %s", str(e))
            return False

    def update_meal(self, profile_id: str, meal_id: str, updates: dict) -> Meal | None:
        """Apply field updates to a meal.

        Args:
            profile_id: Owner of the meal
            meal_id: ID of the meal to update
            updates: Fields to update

        Returns:
            Updated Meal, None if not found or the update failed
        """
        try:
            ref = self._collection(profile_id, "meals").document(meal_id)
            doc = ref.get()
            if not doc.exists:
                logger.warning("Meal not found: %s", meal_id)
                return None
            data = doc.to_dict()
            data.update(updates)
            meal = Meal(**data)
            ref.set(_to_document(meal))
            return meal
        except Exception as e:
            logger.error("Failed to update meal: %s", str(e))
            return None

    def delete_meal(self, profile_id: str, meal_id: str) -> bool:
        """Delete a meal.

        Returns:
            True if the meal existed and was deleted
        """
        try:
            ref = self._collection(profile_id, "meals").document(meal_id)
            if not ref.get().exists:
                logger.warning("Meal not found: %s", meal_id)
                return False
            ref.delete()
            return True
        except Exception as e:
            logger.error("Failed to delete meal: %s", str(e))
            return False

    def search_meals(
        self,
        profile_id: str,
        query: str,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 20,
    ) -> list[Meal]:
        """Search meals by name.

        Simple case-insensitive substring match on name.

        Returns:
            Matching meals, most recent first
        """
        logger.debug("Searching meals for %s: %s", profile_id[:8], query)
        query_lower = query.lower()
        try:
            ref = self._collection(profile_id, "meals")
            if start_date:
                ref = ref.where("date", ">=", start_date.isoformat())
            if end_date:
                ref = ref.where("date", "<=", end_date.isoformat())

            # Firestore doesn't support case-insensitive search,
            # so we filter in memory
            results = []
            for doc in ref.order_by("date", direction=firestore.Query.DESCENDING).stream():
                meal = Meal(**doc.to_dict())
                if query_lower in meal.name.lower():
                    results.append(meal)
                    if len(results) >= limit:
                        break
            return results
        except Exception as e:
            logger.error("Failed to search meals: %s", str(e))
            return []

    # ==================== Workout Operations ====================

    def list_workouts(self, profile_id: str, start_date: date, end_date: date) -> list[Workout]:
        logger.debug("Fetching workouts for %s from %s to %s", profile_id[:8], start_date, end_date)
        try:
            return [Workout(**doc.to_dict()) for doc in self._range_query(profile_id, "workouts", start_date, end_date)]
        except Exception as e:
            logger.error("Failed to fetch workouts: %s", str(e))
            return []

    def add_workout(self, workout: Workout) -> bool:
        logger.info("Logging workout for %s on %s", workout.profile_id[:8], workout.date)
        try:
            self._collection(workout.profile_id, "workouts").document(workout.id).set(_to_document(workout))
            return True
        except Exception as e:
            logger.error("Failed to log workout: %s", str(e))
            return False

    def latest_workout(self, profile_id: str, on_or_before: date) -> Workout | None:
        """Most recent workout dated on or before the given day, of any age."""
        try:
            query = (
                self._collection(profile_id, "workouts")
                .where("date", "<=", on_or_before.isoformat())
                .order_by("date", direction=firestore.Query.DESCENDING)
                .limit(1)
            )
            for doc in query.stream():
                return Workout(**doc.to_dict())
            return None
        except Exception as e:
            logger.error("Failed to fetch latest workout: %s", str(e))
            return None

    # ==================== Weigh-in Operations ====================

    def upsert_weigh_in(self, weigh_in: WeighIn) -> bool:
        """Save a weigh-in, replacing any earlier one on the same date."""
        logger.info("Logging weigh-in for %s on %s", weigh_in.profile_id[:8], weigh_in.date)
        try:
            ref = self._collection(weigh_in.profile_id, "weigh_ins").document(weigh_in.date.isoformat())
            ref.set(_to_document(weigh_in))
            return True
        except Exception as e:
            logger.error("Failed to log weigh-in: %s", str(e))
            return False

    def list_weigh_ins(self, profile_id: str, start_date: date, end_date: date) -> list[WeighIn]:
        try:
            return [WeighIn(**doc.to_dict()) for doc in self._range_query(profile_id, "weigh_ins", start_date, end_date)]
        except Exception as e:
            logger.error("Failed to fetch weigh-ins: %s", str(e))
            return []

    def get_weigh_in(self, profile_id: str, log_date: date) -> WeighIn | None:
        try:
            doc = self._collection(profile_id, "weigh_ins").document(log_date.isoformat()).get()
            if not doc.exists:
                return None
            return WeighIn(**doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch weigh-in: %s", str(e))
            return None

    def latest_weigh_in(self, profile_id: str, on_or_before: date) -> WeighIn | None:
        """Most recent weigh-in dated on or before the given day."""
        try:
            query = (
                self._collection(profile_id, "weigh_ins")
                .where("date", "<=", on_or_before.isoformat())
                .order_by("date", direction=firestore.Query.DESCENDING)
                .limit(1)
            )
            for doc in query.stream():
                return WeighIn(**doc.to_dict())
            return None
        except Exception as e:
            logger.error("Failed to fetch latest weigh-in: %s", str(e))
            return None

    # ==================== Insight Operations ====================

    def list_active_insights(self, profile_id: str, limit: int = 20) -> list[Insight]:
        try:
            query = (
                self._collection(profile_id, "insights")
                .where("active", "==", True)
                .order_by("updated_at", direction=firestore.Query.DESCENDING)
                .limit(limit)
            )
            return [Insight(**doc.to_dict()) for doc in query.stream()]
        except Exception as e:
            logger.error("Failed to fetch insights: %s", str(e))
            return []

    def count_active_insights(self, profile_id: str) -> int:
        """Count active insights.

        Unlike the other reads, errors propagate to the caller.
        """
        query = self._collection(profile_id, "insights").where("active", "==", True)
        return sum(1 for _ in query.stream())

    def get_insight(self, profile_id: str, insight_id: str) -> Insight | None:
        try:
            doc = self._collection(profile_id, "insights").document(insight_id).get()
            if not doc.exists:
                return None
            return Insight(**doc.to_dict())
        except Exception as e:
            logger.error("Failed to fetch insight: %s", str(e))
            return None

    def save_insight(self, insight: Insight) -> bool:
        """Create or overwrite an insight. Never deletes."""
        logger.info("Saving insight for %s: %s", insight.profile_id[:8], insight.id[:8])
        try:
            self._collection(insight.profile_id, "insights").document(insight.id).set(_to_document(insight))
            return True
        except Exception as e:
            logger.error("Failed to save insight: %s", str(e))
            return False

