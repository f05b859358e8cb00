"""
Testes da normalização de IDs de usuário
"""
from app.utils.identity import normalize_user_id, same_user, exclude_actor, merge_user_ids


def test_normalize_user_id_trims_and_lowercases():
    assert normalize_user_id("  ABC-123 ") == "abc-123"
    assert normalize_user_id(None) == ""


def test_same_user_ignores_case_and_whitespace():
    assert same_user("U1", " u1 ")
    assert not same_user("u1", "u2")
    # IDs vazios nunca são o mesmo usuário
    assert not same_user("", "  ")
    assert not same_user(None, None)


def test_exclude_actor_removes_all_variants_of_actor():
    result = exclude_actor(["u1", "U1 ", " u1", "u2", "u3"], "u1")
    assert result == {"u2", "u3"}


def test_exclude_actor_keeps_original_format_and_drops_blank_ids():
    result = exclude_actor(["User-A", "  ", "", "user-b"], "USER-B")
    assert result == {"User-A"}


def test_exclude_actor_with_missing_actor_keeps_everyone():
    assert exclude_actor(["u1", "u2"], None) == {"u1", "u2"}


def test_merge_user_ids_dedupes_by_normalized_id_first_source_wins():
    merged = merge_user_ids(["U2", "u3"], ["u2", " U3 ", "u4", ""])
    assert merged == {"U2", "u3", "u4"}
