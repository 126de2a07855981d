from stampede_monitor.changes import diff_keys

A = "2025-06-01|_|18:00"
B = "2025-06-01|_|19:00"
C = "2025-06-02|Lanes|12:00"


def test_identical_sets_have_no_changes():
    diff = diff_keys({A, B}, {A, B})
    assert diff.added == set()
    assert diff.removed == set()
    assert not diff.has_changes


def test_new_slot_is_added():
    diff = diff_keys({A}, {A, B})
    assert diff.added == {B}
    assert diff.removed == set()
    assert diff.has_changes


def test_empty_scan_removes_everything():
    diff = diff_keys([A, B], [])
    assert diff.added == set()
    assert diff.removed == {A, B}


def test_reversing_arguments_swaps_sides():
    forward = diff_keys({A, B}, {B, C})
    backward = diff_keys({B, C}, {A, B})
    assert forward.added == backward.removed == {C}
    assert forward.removed == backward.added == {A}
    assert not forward.added & forward.removed
