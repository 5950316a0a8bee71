"""Tests for generated plan decoding.

Covers the flattened day-string grammar, structured day objects with segment
aliases, segment token recovery and root-level validation.
"""

import copy

import pytest

from plan_engine.errors import MalformedPlanError
from plan_engine.plans import decode_day, decode_plan, decode_segments, parse_segment_token


class TestDayStrings:
    def test_rest_day(self):
        day = decode_day("Monday|0|true|false|REST|Rest Day|0|")

        assert day.is_rest_day is True
        assert day.activity_category == "REST"
        assert day.workout_structure == []
        assert day.day_name == "Monday"

    def test_run_day_with_three_segments(self):
        day = decode_day(
            "Tuesday|1|false|false|RUN|Easy Run|40|"
            "WARMUP:Easy jog,5 min,Zone 1||MAIN:Steady run,30 min,Zone 2||COOLDOWN:Walk,5 min,Zone 1"
        )

        assert [segment.segment_type for segment in day.workout_structure] == ["WARMUP", "MAIN", "COOLDOWN"]
        assert [segment.intensity_zone for segment in day.workout_structure] == [1, 2, 1]
        assert day.workout_structure[1].description == "Steady run"
        assert day.workout_structure[1].duration_value == 30.0
        assert day.workout_structure[1].duration_unit == "min"
        assert day.total_estimated_duration_min == 40
        assert day.is_rest_day is False

    def test_day_index_kept_verbatim(self):
        assert decode_day("Sunday|7|true|false|REST|Rest Day|0|").day_index == 7
        assert decode_day("Sunday|6|true|false|REST|Rest Day|0|").day_index == 6

    def test_completed_flag(self):
        day = decode_day("Monday|0|true|TRUE|REST|Rest Day|0|")
        assert day.is_completed is True

    def test_too_few_fields_uses_defaults(self, log_messages):
        day = decode_day("Friday|4|true")

        assert day.day_name == "Friday"
        assert day.day_index == 4
        assert day.is_rest_day is True
        assert day.activity_category == "REST"
        assert day.activity_title == "Rest day"
        assert day.workout_structure == []
        assert any("Invalid day format" in message for message in log_messages)

    def test_non_numeric_duration_becomes_zero(self, log_messages):
        day = decode_day("Monday|0|true|false|REST|Rest Day|none|")

        assert day.total_estimated_duration_min == 0
        assert any("Invalid total_duration_min" in message for message in log_messages)

    def test_decimal_duration_truncated(self):
        assert decode_day("Monday|0|true|false|REST|Rest Day|45.0|").total_estimated_duration_min == 45

    def test_missing_separator_parses_single_segment(self, log_messages):
        day = decode_day("Wednesday|2|false|false|RUN|Tempo|30|MAIN:Tempo effort,30 min,Zone 4")

        assert len(day.workout_structure) == 1
        assert day.workout_structure[0].segment_type == "MAIN"
        assert day.workout_structure[0].intensity_zone == 4
        assert any("missing the || separator" in message for message in log_messages)

    def test_short_run_day_is_flagged(self, log_messages):
        decode_day("Wednesday|2|false|false|RUN|Tempo|30|MAIN:Tempo effort,30 min,Zone 4")

        assert any("RUN workout on Wednesday has only 1 segments" in message for message in log_messages)

    def test_segments_without_colon_are_discarded(self):
        day = decode_day("Thursday|3|false|false|STRENGTH|Core|20|plank and squats")
        assert day.workout_structure == []

    def test_unknown_category_is_kept(self, log_messages):
        day = decode_day("Thursday|3|false|false|YOGA|Flow|30|")

        assert day.activity_category == "YOGA"
        assert any("Unknown activity_category 'YOGA'" in message for message in log_messages)

    def test_non_string_non_mapping_becomes_rest_day(self, log_messages):
        day = decode_day(42)

        assert day.is_rest_day is True
        assert day.activity_category == "REST"
        assert any("Unsupported day representation int" in message for message in log_messages)


class TestSegmentTokens:
    def test_description_may_contain_commas_and_colons(self):
        segment = parse_segment_token("MAIN:6x800m, 90s jog: keep it smooth,35 min,Zone 4")

        assert segment is not None
        assert segment.segment_type == "MAIN"
        assert segment.description == "6x800m, 90s jog: keep it smooth"
        assert segment.duration_value == 35.0
        assert segment.intensity_zone == 4

    @pytest.mark.parametrize(
        ("duration", "value", "unit"),
        [
            ("5 km", 5.0, "km"),
            ("800 m", 800.0, "m"),
            ("12.5 min", 12.5, "min"),
            ("10 minutes", 10.0, "min"),
            ("20mins", 20.0, "min"),
        ],
    )
    def test_duration_units(self, duration, value, unit):
        segment = parse_segment_token(f"MAIN:Run,{duration},Zone 2")

        assert segment is not None
        assert segment.duration_value == value
        assert segment.duration_unit == unit

    def test_zone_is_case_insensitive(self):
        segment = parse_segment_token("WARMUP:Jog,10 min,zone3")
        assert segment is not None
        assert segment.intensity_zone == 3

    def test_zone_out_of_range_is_dropped(self, log_messages):
        assert parse_segment_token("MAIN:Sprint,1 min,Zone 6") is None
        assert any("out of range" in message for message in log_messages)

    def test_missing_part_is_dropped(self, log_messages):
        assert parse_segment_token("MAIN:Run,30 min") is None
        assert any("missing parts" in message for message in log_messages)

    def test_invalid_duration_is_dropped(self):
        assert parse_segment_token("MAIN:Run,as long as you like,Zone 2") is None

    def test_invalid_zone_is_dropped(self):
        assert parse_segment_token("MAIN:Run,30 min,hard") is None

    def test_unknown_segment_type_is_kept(self):
        segment = parse_segment_token("STRIDES:Relaxed strides,4 min,Zone 5")
        assert segment is not None
        assert segment.segment_type == "STRIDES"

    def test_segment_type_is_upper_cased(self):
        segment = parse_segment_token(" interval :Hard,3 min,Zone 5")
        assert segment is not None
        assert segment.segment_type == "INTERVAL"

    def test_unknown_segment_type_is_reported(self, log_messages):
        decode_day("Friday|4|false|false|RUN|Strides|20|WARMUP:Jog,10 min,Zone 1||strides:Fast,4 min,Zone 5")

        assert any("Unknown segment types ['STRIDES'] on Friday" in message for message in log_messages)

    def test_bad_token_does_not_drop_neighbours(self):
        segments = decode_segments("WARMUP:Jog,10 min,Zone 1||MAIN:Run,oops,Zone 2||COOLDOWN:Walk,5 min,Zone 1")
        assert [segment.segment_type for segment in segments] == ["WARMUP", "COOLDOWN"]

    def test_empty_segments(self):
        assert decode_segments("") == []
        assert decode_segments("   ") == []


class TestDayObjects:
    def test_workouts_alias(self):
        day = decode_day(
            {
                "day_name": "Saturday",
                "day_index": 5,
                "activity_category": "RUN",
                "activity_title": "Long Run",
                "total_estimated_duration_min": 90,
                "workouts": [
                    {"segment_type": "WARMUP", "duration_value": 10, "duration_unit": "min", "intensity_zone": 1},
                    {"segment_type": "MAIN", "duration_value": 70, "duration_unit": "min", "intensity_zone": 2},
                    {"segment_type": "COOLDOWN", "duration_value": 10, "duration_unit": "min", "intensity_zone": 1},
                ],
            }
        )

        assert [segment.segment_type for segment in day.workout_structure] == ["WARMUP", "MAIN", "COOLDOWN"]
        assert day.total_estimated_duration_min == 90

    def test_canonical_key_wins_over_aliases(self):
        day = decode_day(
            {
                "day_name": "Monday",
                "workout_structure": ["MAIN:Canonical,30 min,Zone 2"],
                "segments": ["MAIN:Alias,30 min,Zone 2"],
            }
        )

        assert len(day.workout_structure) == 1
        assert day.workout_structure[0].description == "Canonical"

    def test_null_canonical_key_falls_through_to_alias(self, log_messages):
        day = decode_day(
            {
                "day_name": "Tuesday",
                "activity_category": "RUN",
                "workout_structure": None,
                "workouts": [
                    "WARMUP:Jog,10 min,Zone 1",
                    "MAIN:Steady,30 min,Zone 2",
                    "COOLDOWN:Walk,5 min,Zone 1",
                ],
            }
        )

        assert [segment.segment_type for segment in day.workout_structure] == ["WARMUP", "MAIN", "COOLDOWN"]
        assert not any("has only" in message for message in log_messages)

    def test_all_segment_keys_null(self):
        day = decode_day({"day_name": "Monday", "activity_category": "REST", "workout_structure": None, "segments": None})

        assert day.workout_structure == []

    def test_unknown_day_name_is_kept_with_warning(self, log_messages):
        day = decode_day({"day_name": "Funday", "activity_category": "REST"})

        assert day.day_name == "Funday"
        assert any("Unknown day_name 'Funday'" in message for message in log_messages)

    def test_non_list_segments_are_wrapped(self):
        day = decode_day(
            {
                "day_name": "Monday",
                "segments": {"segment_type": "MAIN", "duration_value": 30, "duration_unit": "min", "intensity_zone": 2},
            }
        )

        assert len(day.workout_structure) == 1

    def test_invalid_segment_dict_is_dropped(self, log_messages):
        day = decode_day(
            {
                "day_name": "Monday",
                "workout_structure": [
                    {"segment_type": "MAIN", "duration_value": 30, "duration_unit": "min", "intensity_zone": 9},
                    {"segment_type": "COOLDOWN", "duration_value": 5, "duration_unit": "min", "intensity_zone": 1},
                ],
            }
        )

        assert [segment.segment_type for segment in day.workout_structure] == ["COOLDOWN"]
        assert any("Dropping invalid segment" in message for message in log_messages)

    def test_unknown_keys_are_preserved(self):
        day = decode_day({"day_name": "Monday", "is_rest_day": True, "coach_note": "Sleep in"})

        assert day.model_extra is not None
        assert day.model_extra["coach_note"] == "Sleep in"

    def test_invalid_field_falls_back_to_default(self, log_messages):
        day = decode_day({"day_name": "Monday", "day_index": "first", "is_rest_day": True})

        assert day.day_index == 0
        assert day.is_rest_day is True
        assert any("day_index" in message for message in log_messages)


class TestDecodePlan:
    def test_decodes_full_plan(self, make_payload):
        plan = decode_plan(make_payload())

        assert plan.meta.plan_name == "Base Builder"
        assert plan.meta.start_date.isoformat() == "2025-01-06"
        assert plan.periodization_overview.phases == ["Base", "Build"]
        assert len(plan.schedule) == 1
        assert [day.day_name for day in plan.schedule[0].days] == ["Monday", "Tuesday"]

    @pytest.mark.parametrize("section", ["meta", "periodization_overview", "schedule"])
    def test_missing_root_section_raises(self, make_payload, section):
        payload = make_payload()
        del payload[section]

        with pytest.raises(MalformedPlanError) as exc_info:
            decode_plan(payload)
        assert exc_info.value.missing == [section]

    def test_non_mapping_raises(self):
        with pytest.raises(MalformedPlanError):
            decode_plan(["not", "a", "plan"])

    def test_input_is_not_mutated(self, make_payload):
        payload = make_payload(
            weeks=[[{"day_name": "Monday", "workouts": ["MAIN:Run,30 min,Zone 2"], "coach_note": "x"}]]
        )
        snapshot = copy.deepcopy(payload)

        decode_plan(payload)

        assert payload == snapshot

    def test_order_is_preserved(self, make_payload, make_run_day):
        weeks = [
            [make_run_day("Sunday", 6, title="Third")],
            [make_run_day("Monday", 0, title="First"), make_run_day("Friday", 4, title="Second")],
        ]
        plan = decode_plan(make_payload(weeks=weeks))

        titles = [day.activity_title for week in plan.schedule for day in week.days]
        assert titles == ["Third", "First", "Second"]

    def test_unknown_plan_type_is_kept(self, make_payload, log_messages):
        payload = make_payload()
        payload["meta"]["plan_type"] = "ULTRA"

        plan = decode_plan(payload)

        assert plan.meta.plan_type == "ULTRA"
        assert any("Unknown plan_type 'ULTRA'" in message for message in log_messages)

    def test_invalid_start_date_becomes_none(self, make_payload, log_messages):
        payload = make_payload(start_date="next monday")

        plan = decode_plan(payload)

        assert plan.start_date is None
        assert any("start_date" in message for message in log_messages)

    def test_empty_phases_warn(self, make_payload, log_messages):
        payload = make_payload()
        payload["periodization_overview"]["phases"] = []

        plan = decode_plan(payload)

        assert plan.periodization_overview.phases == []
        assert any("no phases" in message for message in log_messages)

    def test_week_numbers_out_of_order_warn(self, make_payload, log_messages):
        payload = make_payload(weeks=[[], []])
        payload["schedule"][1]["week_number"] = 1

        plan = decode_plan(payload)

        assert [week.week_number for week in plan.schedule] == [1, 1]
        assert any("does not increase" in message for message in log_messages)

    def test_missing_week_number_uses_position(self, make_payload):
        payload = make_payload(weeks=[[], []])
        del payload["schedule"][1]["week_number"]

        plan = decode_plan(payload)

        assert plan.schedule[1].week_number == 2
