"""
File-based storage for the rotation, exercise catalog and workout history.

Layout (all in one directory):
- rotation.json   the rotation with its days, priority rules and growth settings
- exercises.json  the exercise catalog (list of objects)
- workouts.jsonl  workout history, one session per line, sorted by date
"""

import json
import warnings
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from ..core.models import CatalogExercise, Rotation, WorkoutSession
from .serializers import (
    ValidationError,
    catalog_exercise_to_dict,
    dict_to_catalog_exercise,
    dict_to_rotation,
    json_line_to_session,
    rotation_to_dict,
    session_to_json_line,
)


class RotationStore:
    """
    Manages the rotation file and its sibling catalog / history files.
    """

    def __init__(self, rotation_path: str | Path):
        """
        Initialize the store.

        Args:
            rotation_path: Path to rotation.json; siblings live next to it
        """
        self.rotation_path = Path(rotation_path)
        self.catalog_path = self.rotation_path.parent / "exercises.json"
        self.workouts_path = self.rotation_path.parent / "workouts.jsonl"

    def exists(self) -> bool:
        """Check if the rotation file exists."""
        return self.rotation_path.exists()

    def init(self, rotation: Rotation) -> None:
        """
        Write a new rotation and create empty catalog / history files.

        Creates parent directories if needed.  Existing catalog and history
        files are kept.
        """
        self.rotation_path.parent.mkdir(parents=True, exist_ok=True)
        self.save_rotation(rotation)

        if not self.workouts_path.exists():
            self.workouts_path.touch()
        if not self.catalog_path.exists():
            self._write_catalog([])

    # -------------------------------------------------------------------------
    # Rotation
    # -------------------------------------------------------------------------

    def load_rotation(self) -> Rotation:
        """
        Load the rotation.

        Raises:
            FileNotFoundError: If the rotation file doesn't exist
            ValidationError: If the file is not valid
        """
        if not self.rotation_path.exists():
            raise FileNotFoundError(
                f"Rotation not found: {self.rotation_path}. Run 'init' first."
            )

        try:
            with open(self.rotation_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.rotation_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValidationError(f"Error parsing {self.rotation_path}: expected an object")

        return dict_to_rotation(data)

    def save_rotation(self, rotation: Rotation) -> None:
        """Write the rotation (whole-file rewrite)."""
        self.rotation_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.rotation_path, "w") as f:
            json.dump(rotation_to_dict(rotation), f, indent=2)

    # -------------------------------------------------------------------------
    # Exercise catalog
    # -------------------------------------------------------------------------

    def load_catalog(self) -> list[CatalogExercise]:
        """
        Load the exercise catalog, sorted by name.

        Malformed entries are skipped with a warning.

        Returns:
            List of CatalogExercise (empty if file is missing)
        """
        if not self.catalog_path.exists():
            return []

        try:
            with open(self.catalog_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.catalog_path}: {e}") from e

        exercises: list[CatalogExercise] = []
        for i, item in enumerate(data if isinstance(data, list) else [], 1):
            try:
                exercises.append(dict_to_catalog_exercise(item))
            except ValidationError as e:
                warnings.warn(
                    f"lift-rotation: skipping catalog entry {i} in {self.catalog_path}: {e}",
                    stacklevel=2,
                )

        exercises.sort(key=lambda e: e.name.lower())
        return exercises

    def add_catalog_exercise(self, exercise: CatalogExercise) -> None:
        """
        Add an exercise to the catalog.

        Raises:
            ValidationError: If an exercise with the same name exists
        """
        exercises = self.load_catalog()
        if any(e.name.lower() == exercise.name.lower() for e in exercises):
            raise ValidationError(f"Exercise '{exercise.name}' already exists")
        exercises.append(exercise)
        exercises.sort(key=lambda e: e.name.lower())
        self._write_catalog(exercises)

    def remove_catalog_exercise(self, name: str) -> CatalogExercise:
        """
        Remove an exercise from the catalog by (case-insensitive) name.

        Raises:
            KeyError: If no exercise has that name
        """
        exercises = self.load_catalog()
        for i, e in enumerate(exercises):
            if e.name.lower() == name.lower():
                removed = exercises.pop(i)
                self._write_catalog(exercises)
                return removed
        raise KeyError(f"Exercise '{name}' not found")

    def _write_catalog(self, exercises: list[CatalogExercise]) -> None:
        self.catalog_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.catalog_path, "w") as f:
            json.dump([catalog_exercise_to_dict(e) for e in exercises], f, indent=2)

    # -------------------------------------------------------------------------
    # Workout history
    # -------------------------------------------------------------------------

    def load_workouts(self) -> list[WorkoutSession]:
        """
        Load all workout sessions, sorted by date.

        Returns:
            List of WorkoutSession (empty if file is missing)

        Raises:
            ValidationError: If a line cannot be parsed
        """
        if not self.workouts_path.exists():
            return []

        sessions: list[WorkoutSession] = []

        with open(self.workouts_path, "r") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    sessions.append(json_line_to_session(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.workouts_path}: {e}"
                    ) from e

        sessions.sort(key=lambda s: s.date)
        return sessions

    def append_workout(self, session: WorkoutSession) -> None:
        """
        Add a workout session in chronological order.

        A session on a date that already has one is merged into it: the new
        logs are appended after the existing ones and the notes are joined.
        """
        sessions = self.load_workouts()

        session_date = datetime.strptime(session.date, "%Y-%m-%d")
        insert_idx = len(sessions)

        for i, existing in enumerate(sessions):
            existing_date = datetime.strptime(existing.date, "%Y-%m-%d")
            if session_date < existing_date:
                insert_idx = i
                break
            elif session_date == existing_date:
                sessions[i] = _merge_sessions(existing, session)
                insert_idx = -1  # Signal that we merged
                break

        if insert_idx >= 0:
            sessions.insert(insert_idx, session)

        self._write_workouts(sessions)

    def delete_workout_at(self, index: int) -> WorkoutSession:
        """
        Delete the session at the given 0-based index in sorted history.

        Raises:
            IndexError: If index is out of range
        """
        sessions = self.load_workouts()
        if index < 0 or index >= len(sessions):
            raise IndexError(f"Workout index {index} out of range (0-{len(sessions) - 1})")
        removed = sessions.pop(index)
        self._write_workouts(sessions)
        return removed

    def _write_workouts(self, sessions: list[WorkoutSession]) -> None:
        self.workouts_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.workouts_path, "w") as f:
            for session in sessions:
                f.write(session_to_json_line(session) + "\n")


def _merge_sessions(existing: WorkoutSession, new: WorkoutSession) -> WorkoutSession:
    notes = "; ".join(n for n in (existing.notes, new.notes) if n) or None
    return replace(existing, logs=[*existing.logs, *new.logs], notes=notes)


def get_default_rotation_path() -> Path:
    """Default location of rotation.json (~/.lift-rotation/rotation.json)."""
    return Path.home() / ".lift-rotation" / "rotation.json"