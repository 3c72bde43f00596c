"""
Tests for persistence: serializers, the file store and the YAML defaults
loader.
"""

import json
import tempfile
from pathlib import Path

import pytest

from lift_rotation.core.engine.config_loader import (
    RotationDefaults,
    defaults_from_dict,
    load_defaults,
    load_model_config,
)
from lift_rotation.core.models import (
    CatalogExercise,
    DayExercise,
    GrowthSettings,
    PriorityRules,
    Rotation,
    RotationDay,
    WorkoutLog,
    WorkoutSession,
)
from lift_rotation.io.rotation_store import RotationStore
from lift_rotation.io.serializers import (
    ValidationError,
    dict_to_growth_settings,
    dict_to_priority_rules,
    dict_to_rotation,
    json_line_to_session,
    parse_frequency,
    parse_growth_type,
    parse_log_entry,
    rotation_to_dict,
    session_to_json_line,
    validate_date,
    validate_priorities,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _rotation() -> Rotation:
    return Rotation(
        name="Upper Lower",
        days=[
            RotationDay("Upper", [DayExercise("Bench Press", 135.0, 10, 3, partial_reps=2)]),
            RotationDay("Lower", [DayExercise("Squat", 185.0, 8, 4)]),
        ],
        current_day_index=1,
        last_workout_date="2026-03-01",
        priority_rules=PriorityRules(rep_max=12, weight_increment=5.0),
        growth_settings=GrowthSettings(growth_type="sigmoid", amount=3.0, iteration_count=4),
        strategy="optimize",
    )


# ===========================================================================
# serializers
# ===========================================================================


class TestSerializers:
    def test_rotation_survives_json(self):
        rotation = _rotation()
        data = json.loads(json.dumps(rotation_to_dict(rotation)))
        assert dict_to_rotation(data) == rotation

    def test_missing_rule_keys_take_defaults(self):
        rules = dict_to_priority_rules({"rep_max": 20})
        assert rules.rep_max == 20
        assert rules.rep_min == PriorityRules().rep_min

    def test_unknown_growth_strings_are_kept(self):
        growth = dict_to_growth_settings({"growth_type": "cubic", "frequency": "monthly"})
        assert growth.growth_type == "cubic"
        assert growth.frequency == "monthly"

    def test_rotation_bad_strategy(self):
        data = rotation_to_dict(_rotation())
        data["strategy"] = "random"
        with pytest.raises(ValidationError):
            dict_to_rotation(data)

    def test_rotation_bad_day_index(self):
        data = rotation_to_dict(_rotation())
        data["current_day_index"] = 5
        with pytest.raises(ValidationError):
            dict_to_rotation(data)

    def test_rotation_bad_exercise(self):
        data = rotation_to_dict(_rotation())
        data["days"][0]["exercises"][0]["reps"] = 0
        with pytest.raises(ValidationError):
            dict_to_rotation(data)

    def test_rotation_missing_name(self):
        with pytest.raises(ValidationError):
            dict_to_rotation({"days": []})

    @pytest.mark.parametrize(
        "corrupt",
        [
            {"days": [5]},
            {"days": 5},
            {"days": [{"name": "Upper", "exercises": ["Bench"]}]},
            {"priority_rules": [1, 2]},
            {"growth_settings": "fast"},
        ],
    )
    def test_rotation_wrong_shapes(self, corrupt):
        data = rotation_to_dict(_rotation())
        data.update(corrupt)
        with pytest.raises(ValidationError):
            dict_to_rotation(data)

    def test_rotation_not_an_object(self):
        with pytest.raises(ValidationError, match="expected an object"):
            dict_to_rotation([])

    @pytest.mark.parametrize("line", ["5", "[]", '"2026-03-01"', '{"date":"2026-03-01","logs":[7]}'])
    def test_session_wrong_shapes(self, line):
        with pytest.raises(ValidationError):
            json_line_to_session(line)

    def test_session_json_line_is_compact(self):
        session = WorkoutSession(
            date="2026-03-02",
            logs=[WorkoutLog("Squat", 185.0, 8, 4), WorkoutLog("Lunge", 40.0, 10, 3, completed=False)],
        )
        line = session_to_json_line(session)
        assert "\n" not in line
        assert "partial_reps" not in line
        assert json_line_to_session(line) == session

    def test_session_bad_json(self):
        with pytest.raises(ValidationError):
            json_line_to_session("{not json")

    def test_validate_date(self):
        assert validate_date("2026-02-28") == "2026-02-28"
        with pytest.raises(ValidationError):
            validate_date("2026-02-30")
        with pytest.raises(ValidationError):
            validate_date("02/03/2026")

    def test_validate_priorities(self):
        assert validate_priorities(PriorityRules(rep_priority=3, set_priority=1, weight_priority=2))
        with pytest.raises(ValidationError):
            validate_priorities(PriorityRules(rep_priority=1, set_priority=1, weight_priority=2))

    def test_parse_choices(self):
        assert parse_growth_type(" Sigmoid ") == "sigmoid"
        assert parse_frequency("WEEK") == "week"
        with pytest.raises(ValidationError):
            parse_frequency("monthly")


class TestParseLogEntry:
    def test_basic_entry(self):
        log = parse_log_entry("Bench Press @ 135 x 10 x 3")
        assert (log.exercise, log.weight, log.reps, log.sets, log.partial_reps) == (
            "Bench Press", 135.0, 10, 3, 0,
        )

    def test_compact_entry_with_partials(self):
        log = parse_log_entry("Squat@185x8x4+2")
        assert (log.exercise, log.weight, log.reps, log.sets, log.partial_reps) == (
            "Squat", 185.0, 8, 4, 2,
        )

    def test_bodyweight_and_unicode_times(self):
        log = parse_log_entry("Pull-up @ 0 × 6 × 3")
        assert log.weight == 0.0
        assert log.total_load == 0.0

    @pytest.mark.parametrize("entry", ["", "Bench 135x10x3", "Bench @ 135 x 10", "Bench @ 135 x 0 x 3"])
    def test_invalid_entries(self, entry):
        with pytest.raises(ValidationError):
            parse_log_entry(entry)


# ===========================================================================
# RotationStore
# ===========================================================================


class TestRotationStore:
    def test_init_creates_files(self, temp_dir):
        store = RotationStore(temp_dir / "nested" / "rotation.json")
        store.init(_rotation())
        assert store.exists()
        assert store.catalog_path.exists()
        assert store.workouts_path.exists()
        assert store.load_rotation() == _rotation()

    def test_load_missing_rotation(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            RotationStore(temp_dir / "rotation.json").load_rotation()

    def test_load_corrupt_rotation(self, temp_dir):
        path = temp_dir / "rotation.json"
        path.write_text("{oops")
        with pytest.raises(ValidationError):
            RotationStore(path).load_rotation()

    def test_init_keeps_existing_history(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.init(_rotation())
        store.append_workout(WorkoutSession("2026-03-01", [WorkoutLog("Squat", 185.0, 8, 4)]))
        store.init(Rotation(name="Fresh"))
        assert len(store.load_workouts()) == 1

    def test_catalog_add_sorted_and_duplicate(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.add_catalog_exercise(CatalogExercise("Squat", category="legs"))
        store.add_catalog_exercise(CatalogExercise("bench press", category="push"))
        assert [e.name for e in store.load_catalog()] == ["bench press", "Squat"]

        with pytest.raises(ValidationError):
            store.add_catalog_exercise(CatalogExercise("SQUAT"))

    def test_catalog_remove(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.add_catalog_exercise(CatalogExercise("Squat"))
        assert store.remove_catalog_exercise("squat").name == "Squat"
        assert store.load_catalog() == []
        with pytest.raises(KeyError):
            store.remove_catalog_exercise("Squat")

    def test_catalog_skips_malformed_entries(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.catalog_path.write_text(json.dumps([{"name": "Row"}, {"description": "no name"}]))
        with pytest.warns(UserWarning, match="skipping catalog entry 2"):
            exercises = store.load_catalog()
        assert [e.name for e in exercises] == ["Row"]

    def test_workouts_sorted_and_same_date_merged(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.append_workout(WorkoutSession("2026-03-05", [WorkoutLog("Squat", 185.0, 8, 4)], notes="legs"))
        store.append_workout(WorkoutSession("2026-03-01", [WorkoutLog("Bench", 135.0, 10, 3)]))
        store.append_workout(WorkoutSession("2026-03-05", [WorkoutLog("Row", 95.0, 10, 3)], notes="back"))

        sessions = store.load_workouts()
        assert [s.date for s in sessions] == ["2026-03-01", "2026-03-05"]
        assert [log.exercise for log in sessions[1].logs] == ["Squat", "Row"]
        assert sessions[1].notes == "legs; back"

    def test_same_date_merge_without_notes(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.append_workout(WorkoutSession("2026-03-05", [WorkoutLog("Squat", 185.0, 8, 4)]))
        store.append_workout(WorkoutSession("2026-03-05", [WorkoutLog("Squat", 190.0, 8, 4)]))

        (session,) = store.load_workouts()
        assert [log.weight for log in session.logs] == [185.0, 190.0]
        assert session.notes is None

    def test_delete_workout_at(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.append_workout(WorkoutSession("2026-03-01", [WorkoutLog("Bench", 135.0, 10, 3)]))
        store.append_workout(WorkoutSession("2026-03-02", [WorkoutLog("Squat", 185.0, 8, 4)]))

        removed = store.delete_workout_at(0)
        assert removed.date == "2026-03-01"
        assert [s.date for s in store.load_workouts()] == ["2026-03-02"]
        with pytest.raises(IndexError):
            store.delete_workout_at(5)

    def test_non_object_history_line(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.workouts_path.write_text('{"date":"2026-03-01","logs":[]}\n5\n')
        with pytest.raises(ValidationError, match="line 2"):
            store.load_workouts()

    def test_hand_edited_rotation_with_bad_day(self, temp_dir):
        path = temp_dir / "rotation.json"
        data = rotation_to_dict(_rotation())
        data["days"] = [5]
        path.write_text(json.dumps(data))
        with pytest.raises(ValidationError, match="expected an object"):
            RotationStore(path).load_rotation()

    def test_catalog_skips_non_object_entries(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.catalog_path.write_text(json.dumps([5, {"name": "Row"}]))
        with pytest.warns(UserWarning, match="skipping catalog entry 1"):
            exercises = store.load_catalog()
        assert [e.name for e in exercises] == ["Row"]

    def test_bad_history_line_reports_line_number(self, temp_dir):
        store = RotationStore(temp_dir / "rotation.json")
        store.workouts_path.write_text('{"date":"2026-03-01","logs":[]}\nnot json\n')
        with pytest.raises(ValidationError, match="line 2"):
            store.load_workouts()


# ===========================================================================
# YAML defaults
# ===========================================================================


class TestConfigLoader:
    def test_bundled_defaults(self, temp_dir):
        defaults = load_defaults(user_path=temp_dir / "missing.yaml")
        assert defaults.priority_rules == PriorityRules()
        assert defaults.growth_settings == GrowthSettings()
        assert defaults.day_count == 3
        assert defaults.strategy == "cascade"

    def test_user_override_is_deep_merged(self, temp_dir):
        user = temp_dir / "defaults.yaml"
        user.write_text("priority_rules:\n  rep_max: 12\nrotation:\n  day_count: 4\n")
        defaults = load_defaults(user_path=user)
        assert defaults.priority_rules.rep_max == 12
        assert defaults.priority_rules.rep_min == 8
        assert defaults.day_count == 4
        assert defaults.rotation_name == "My Rotation"

    def test_unparseable_user_file_is_ignored(self, temp_dir):
        user = temp_dir / "defaults.yaml"
        user.write_text("priority_rules: [unclosed\n")
        with pytest.warns(UserWarning, match="ignoring user defaults"):
            config = load_model_config(user_path=user)
        assert config["priority_rules"]["rep_max"] == 15

    def test_unknown_user_key_is_ignored(self, temp_dir):
        user = temp_dir / "defaults.yaml"
        user.write_text("growth_settings:\n  speed: 11\n")
        with pytest.warns(UserWarning, match="unknown keys"):
            defaults = load_defaults(user_path=user)
        assert defaults.growth_settings == GrowthSettings()

    def test_defaults_from_empty_dict(self):
        assert defaults_from_dict({}) == RotationDefaults()

    def test_defaults_from_bad_section(self):
        with pytest.raises(ValueError):
            defaults_from_dict({"priority_rules": "fast"})
