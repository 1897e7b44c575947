"""Exact prompt deduplication."""

from conftest import make_interaction

from goldenset.analytics.dedupe import dedupe_exact, hash_interaction


def test_dedupes_whitespace_and_case_variants():
    interactions = [
        make_interaction("a", text="How do I reset my VPN?"),
        make_interaction("b", text="  how do i reset my vpn?  "),
        make_interaction("c", text="HOW DO I RESET MY VPN?\n"),
    ]
    assert [i.interaction_id for i in dedupe_exact(interactions)] == ["a"]


def test_keeps_different_text():
    interactions = [
        make_interaction("a", text="reset vpn"),
        make_interaction("b", text="reset password"),
    ]
    assert [i.interaction_id for i in dedupe_exact(interactions)] == ["a", "b"]


def test_first_wins_and_order_is_stable():
    interactions = [
        make_interaction("1", text="x"),
        make_interaction("2", text="y"),
        make_interaction("3", text="X"),
        make_interaction("4", text="z"),
        make_interaction("5", text="y "),
    ]
    assert [i.interaction_id for i in dedupe_exact(interactions)] == ["1", "2", "4"]


def test_ignores_output_and_dimensions():
    interactions = [
        make_interaction("1", text="q", output_text="answer one", dimensions={"k": "a"}),
        make_interaction("2", text="q", output_text="answer two", dimensions={"k": "b"}),
    ]
    assert hash_interaction(interactions[0]) == hash_interaction(interactions[1])
    assert len(dedupe_exact(interactions)) == 1


def test_idempotent():
    interactions = [make_interaction(str(i), text=t) for i, t in enumerate(["a", "A", "b", " b", "c"])]
    once = dedupe_exact(interactions)
    assert dedupe_exact(once) == once
