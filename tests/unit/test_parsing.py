from regiosync.common.parsing import (
    absolute_url,
    clean_text,
    parse_goal_pair,
    parse_int,
    parse_score,
    url_path_segments,
)


def test_clean_text():
    assert clean_text("  Wisła \n  Kraków ") == "Wisła Kraków"
    assert clean_text("   ") is None
    assert clean_text(None) is None


def test_parse_int():
    assert parse_int("12") == 12
    assert parse_int(" 3. ") == 3
    assert parse_int("-2") == -2
    assert parse_int("—") is None
    assert parse_int("") is None


def test_parse_goal_pair():
    assert parse_goal_pair("10:4") == (10, 4)
    assert parse_goal_pair(" 12 : 5 ") == (12, 5)
    # No colon: both sides default to 0
    assert parse_goal_pair("—") == (0, 0)
    assert parse_goal_pair("") == (0, 0)
    assert parse_goal_pair(None) == (0, 0)
    # Unparsable half defaults to 0
    assert parse_goal_pair("x:3") == (0, 3)


def test_parse_score_only_accepts_int_pairs():
    assert parse_score("2:1") == (2, 1)
    assert parse_score(" 0 : 0 ") == (0, 0)
    assert parse_score("-:-") == (None, None)
    assert parse_score("17:00") == (17, 0)
    assert parse_score("2:") == (None, None)
    assert parse_score("") == (None, None)
    assert parse_score(None) == (None, None)


def test_absolute_url():
    base = "https://regiowyniki.pl"
    assert absolute_url(base, "/druzyna/x/") == "https://regiowyniki.pl/druzyna/x/"
    assert absolute_url(base + "/", "druzyna/x/") == "https://regiowyniki.pl/druzyna/x/"
    assert absolute_url(base, "https://cdn.example.org/herb.png") == "https://cdn.example.org/herb.png"
    assert absolute_url(base, None) is None
    assert absolute_url(base, "") is None


def test_url_path_segments():
    assert url_path_segments("https://regiowyniki.pl/druzyna/Pilka_Nozna/slaskie/GKS/") == [
        "druzyna",
        "Pilka_Nozna",
        "slaskie",
        "GKS",
    ]
    assert url_path_segments("/druzyna/Pilka_Nozna/?q=1") == ["druzyna", "Pilka_Nozna"]
