from school_saas.services.summary import (
    result_status, summarize_attendance, summarize_exam, summarize_staff,
)


def test_attendance_summary_counts_every_status():
    records = [{"status": "present"}, {"status": "present"}, {"status": "absent"}]
    assert summarize_attendance(records) == {"present": 2, "absent": 1, "late": 0, "excused": 0}


def test_empty_attendance_summary_is_all_zeros():
    assert summarize_attendance([]) == {"present": 0, "absent": 0, "late": 0, "excused": 0}


def test_staff_summary_adds_head_counts():
    records = [
        {"status": "present", "staff_type": "teacher"},
        {"status": "late", "staff_type": "teacher"},
        {"status": "absent", "staff_type": "guard"},
        {"status": "present", "staff_type": "driver"},
    ]
    summary = summarize_staff(records)
    assert summary["present"] == 2
    assert summary["late"] == 1
    assert summary["absent"] == 1
    assert summary["total_teachers"] == 2
    assert summary["total_guards"] == 1
    assert summary["total_drivers"] == 1
    assert summary["total_accompaniments"] == 0


def test_exam_summary_and_result_status():
    assert result_status(50, 50) == "pass"
    assert result_status(49.5, 50) == "fail"
    records = [{"status": result_status(m, 40)} for m in (10, 40, 90)]
    assert summarize_exam(records) == {"pass": 2, "fail": 1}
