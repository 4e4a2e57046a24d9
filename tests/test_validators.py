import pytest
from validators import (
    coerce_course_record,
    validate_course_list,
    validate_course_payload,
    validate_import_body,
)


class TestCoerceCourseRecord:
    def test_valid(self):
        rec = coerce_course_record({"name": " 高等数学 ", "credit": "5", "score": 92})
        assert (rec["name"], rec["credit"], rec["score"]) == ("高等数学", 5.0, 92.0)
        assert rec["is_planned"] is False
        assert rec["id"]

    @pytest.mark.parametrize("item", [
        {"credit": 3, "score": 85},
        {"name": "x", "score": 85},
        {"name": "x", "credit": 3},
        {"name": "", "credit": 3, "score": 85},
        {"name": "x" * 50, "credit": 3, "score": 85},
        {"name": "x", "credit": -1, "score": 85},
        {"name": "x", "credit": 3, "score": 101},
        {"name": "x", "credit": 3, "score": -1},
        {"name": "x", "credit": "three", "score": 85},
        {"name": "x", "credit": 3, "score": float("nan")},
        {"name": "x", "credit": True, "score": 85},
        "英语 3 85",
        None,
    ])
    def test_rejects(self, item):
        assert coerce_course_record(item) is None

    def test_planned_only_when_strictly_true(self):
        assert coerce_course_record({"name": "x", "credit": 1, "score": 1, "is_planned": "yes"})["is_planned"] is False
        assert coerce_course_record({"name": "x", "credit": 1, "score": 1, "is_planned": True})["is_planned"] is True


class TestValidateImportBody:
    def test_ok(self):
        assert validate_import_body({"text": "英语 3 85"}, 100) == (None, None)

    def test_ok_with_mode(self):
        assert validate_import_body({"text": "英语 3 85", "mode": "auto"}, 100) == (None, None)

    def test_not_json(self):
        code, _ = validate_import_body(None, 100)
        assert code == "INVALID_INPUT"

    def test_blank_text(self):
        code, _ = validate_import_body({"text": "   "}, 100)
        assert code == "INVALID_INPUT"

    def test_too_long(self):
        code, msg = validate_import_body({"text": "x" * 101}, 100)
        assert code == "INVALID_INPUT"
        assert "100" in msg

    def test_unknown_mode(self):
        code, _ = validate_import_body({"text": "x", "mode": "magic"}, 100)
        assert code == "INVALID_INPUT"


class TestValidateCoursePayload:
    def test_ok(self):
        assert validate_course_payload({"name": "英语", "credit": 3, "score": 85}) == (None, None)

    def test_zero_credit_rejected_for_manual_entry(self):
        code, _ = validate_course_payload({"name": "英语", "credit": 0, "score": 85})
        assert code == "INVALID_INPUT"

    def test_missing_name(self):
        code, msg = validate_course_payload({"credit": 3, "score": 85})
        assert code == "INVALID_INPUT"
        assert "name" in msg

    def test_partial_score_only(self):
        assert validate_course_payload({"score": 70}, partial=True) == (None, None)

    def test_partial_still_checks_present_fields(self):
        code, _ = validate_course_payload({"score": 170}, partial=True)
        assert code == "INVALID_INPUT"

    def test_is_planned_must_be_bool(self):
        code, _ = validate_course_payload({"name": "x", "credit": 1, "score": 1, "is_planned": "true"})
        assert code == "INVALID_INPUT"


class TestValidateCourseList:
    def test_keeps_ids(self):
        courses, err = validate_course_list([{"id": "abc", "name": "x", "credit": 1, "score": 60}])
        assert err is None
        assert courses[0]["id"] == "abc"

    def test_not_a_list(self):
        courses, err = validate_course_list({"name": "x"})
        assert courses is None
        assert "list" in err

    def test_reports_bad_index(self):
        courses, err = validate_course_list([
            {"name": "x", "credit": 1, "score": 60},
            {"name": "y", "credit": 1, "score": 600},
        ])
        assert courses is None
        assert "courses[1]" in err
