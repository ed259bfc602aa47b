from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from urasei.bazi import (
    BRANCH_BY_CHINESE,
    EARTHLY_BRANCHES,
    HEAVENLY_STEMS,
    STEM_BY_CHINESE,
    STEM_BY_PINYIN,
    Element,
    Polarity,
    analyze_strength,
    bazi_month,
    calculate_bazi_chart,
    day_pillar,
    determine_useful_god,
    element_distribution,
    hour_branch_index,
    hour_pillar,
    month_pillar,
    supporting_element,
    year_pillar,
)
from urasei.errors import InvalidInput


def _pair(pillar):
    return pillar.stem.chinese + pillar.branch.chinese


def test_sample_chart_pillars():
    chart = calculate_bazi_chart(datetime(1990, 5, 15), 10)

    assert _pair(chart.year) == "庚午"
    assert _pair(chart.month) == "丙午"
    assert _pair(chart.day) == "庚午"
    assert _pair(chart.hour) == "丙巳"
    assert chart.day_master == STEM_BY_PINYIN["Geng"]
    assert chart.day_master_element == Element.METAL
    assert chart.day_master_polarity == Polarity.YANG


def test_sample_chart_elements_and_gods():
    chart = calculate_bazi_chart(datetime(1990, 5, 15), 10)

    assert chart.elements == {"wood": 0.0, "fire": 4.0, "earth": 0.0, "metal": 2.0, "water": 0.0}
    assert chart.strength["self"] == 2.0
    assert chart.strength["control"] == 0.0
    assert chart.useful_god == Element.EARTH
    assert chart.avoid_god == Element.WOOD
    assert chart.lucky_elements == [Element.EARTH, Element.FIRE]
    assert chart.unlucky_elements == [Element.WOOD]


def test_pillar_derived_fields():
    chart = calculate_bazi_chart("1990-05-15", 10)
    hour = chart.hour
    assert hour.stem_element == Element.FIRE
    assert hour.branch_element == Element.FIRE
    assert hour.polarity == Polarity.YANG
    assert [p.position for p in chart.pillars] == ["year", "month", "day", "hour"]


def test_string_date_matches_datetime():
    assert calculate_bazi_chart("1990-05-15", 10) == calculate_bazi_chart(datetime(1990, 5, 15), 10)
    assert calculate_bazi_chart(date(1990, 5, 15), 10) == calculate_bazi_chart(datetime(1990, 5, 15), 10)


def test_chart_is_deterministic():
    a = calculate_bazi_chart(datetime(1985, 11, 2), 23)
    b = calculate_bazi_chart(datetime(1985, 11, 2), 23)
    assert a == b
    assert a.to_dict() == b.to_dict()


def test_year_pillar_at_reference_year():
    yp = year_pillar(datetime(1984, 2, 4))
    assert (yp.stem.index, yp.branch.index) == (0, 0)


def test_year_pillar_before_li_chun_uses_previous_year():
    yp = year_pillar(datetime(1984, 2, 3))
    assert yp.stem == STEM_BY_CHINESE["癸"]
    assert yp.branch == BRANCH_BY_CHINESE["亥"]
    assert year_pillar(datetime(1984, 1, 20)) == yp


@pytest.mark.parametrize("year", [1850, 1899, 1923, 1984, 1990, 2024, 2100])
def test_year_pillar_has_sixty_year_period(year):
    for month, day in [(1, 15), (2, 3), (2, 4), (7, 30), (12, 31)]:
        assert year_pillar(datetime(year, month, day)) == year_pillar(datetime(year + 60, month, day))


def test_day_pillar_at_reference_date():
    dp = day_pillar(datetime(1900, 1, 1))
    assert dp.stem == HEAVENLY_STEMS[0]
    assert dp.branch == EARTHLY_BRANCHES[0]


def test_day_pillar_depends_only_on_day_offset():
    base = datetime(1900, 1, 1)
    for days in [1, 59, 60, 61, 365, 33006, -1, -61]:
        dp = day_pillar(base + timedelta(days=days))
        assert dp.stem.index == days % 10
        assert dp.branch.index == days % 12
    # time of day never matters
    assert day_pillar(datetime(2001, 3, 3, 0, 0)) == day_pillar(datetime(2001, 3, 3, 23, 59))


def test_day_pillar_cycles_every_sixty_days():
    start = datetime(2020, 6, 1)
    assert day_pillar(start) == day_pillar(start + timedelta(days=60))
    assert day_pillar(start) != day_pillar(start + timedelta(days=30))


@pytest.mark.parametrize("moment, expected", [
    (datetime(1990, 5, 15), 5),
    (datetime(1990, 5, 6), 5),
    (datetime(1990, 5, 5), 4),
    (datetime(1990, 1, 6), 1),
    (datetime(1990, 1, 5), 12),
    (datetime(1990, 12, 7), 12),
    (datetime(1990, 12, 6), 11),
])
def test_bazi_month_solar_term_cutoff(moment, expected):
    assert bazi_month(moment) == expected


def test_month_pillar_branch_starts_at_tiger():
    mp = month_pillar(datetime(1990, 1, 10), 6)
    assert mp.branch.animal == "Tiger"
    mp = month_pillar(datetime(1990, 1, 3), 6)
    assert mp.branch.animal == "Ox"


def test_month_stem_depends_on_year_stem_group_of_five():
    moment = datetime(1990, 8, 20)
    for index in range(5):
        assert month_pillar(moment, index) == month_pillar(moment, index + 5)


@pytest.mark.parametrize("hour, branch", [
    (23, 0), (0, 0), (1, 1), (2, 1), (3, 2), (10, 5), (11, 6), (12, 6), (21, 11), (22, 11),
])
def test_hour_branch_index(hour, branch):
    assert hour_branch_index(hour) == branch


def test_hour_pillar_stem_table():
    # Jia/Ji day, Zi hour
    assert hour_pillar(0, 0).stem == STEM_BY_CHINESE["甲"]
    assert hour_pillar(0, 5).stem == STEM_BY_CHINESE["甲"]
    # Wu/Gui day, Zi hour
    assert hour_pillar(23, 4).stem == STEM_BY_CHINESE["壬"]


def test_indices_stay_in_table_range():
    start = datetime(1899, 12, 20)
    for step in range(0, 3 * 365, 13):
        moment = start + timedelta(days=step)
        chart = calculate_bazi_chart(moment, step % 24)
        for pillar in chart.pillars:
            assert 0 <= pillar.stem.index <= 9
            assert 0 <= pillar.branch.index <= 11
            assert HEAVENLY_STEMS[pillar.stem.index] == pillar.stem
            assert EARTHLY_BRANCHES[pillar.branch.index] == pillar.branch


def test_elements_sum_to_six_and_gods_differ():
    start = datetime(1950, 1, 1)
    for step in range(0, 40 * 365, 97):
        chart = calculate_bazi_chart(start + timedelta(days=step), step % 24)
        assert all(v >= 0 for v in chart.elements.values())
        assert sum(chart.elements.values()) == 6.0
        assert chart.useful_god != chart.avoid_god
        assert chart.lucky_elements[0] == chart.useful_god
        assert chart.unlucky_elements == [chart.avoid_god]


def test_element_distribution_weights():
    chart = calculate_bazi_chart(datetime(1990, 5, 15), 10)
    assert element_distribution(chart.pillars) == chart.elements


def test_supporting_element_inverts_production():
    assert supporting_element(Element.WOOD) == Element.WATER
    assert supporting_element(Element.FIRE) == Element.WOOD
    assert supporting_element(Element.METAL) == Element.EARTH


def test_strong_day_master_is_drained():
    jia = STEM_BY_PINYIN["Jia"]
    elements = {"wood": 3.0, "fire": 0.5, "earth": 1.0, "metal": 0.5, "water": 1.0}
    strength = analyze_strength(jia, elements)
    assert strength["self"] == 3.5
    assert strength["control"] == 1.0
    assert determine_useful_god(jia, elements) == (Element.FIRE, Element.WOOD)


def test_weak_day_master_is_supported():
    jia = STEM_BY_PINYIN["Jia"]
    elements = {"wood": 1.0, "fire": 2.0, "earth": 2.0, "metal": 1.0, "water": 0.0}
    assert determine_useful_god(jia, elements) == (Element.WATER, Element.EARTH)


def test_threshold_is_exclusive():
    jia = STEM_BY_PINYIN["Jia"]
    elements = {"wood": 2.0, "fire": 1.0, "earth": 1.0, "metal": 1.0, "water": 1.0}
    # self = 2.0 + 0.5 = 2.5, not above the threshold
    assert determine_useful_god(jia, elements) == (Element.WATER, Element.EARTH)


@pytest.mark.parametrize("hour", [-1, 24, 10.5, True, "10", None])
def test_invalid_hour_rejected(hour):
    with pytest.raises(InvalidInput):
        calculate_bazi_chart(datetime(1990, 5, 15), hour)


@pytest.mark.parametrize("value", ["1990-13-45", "not a date", None, 19900515])
def test_invalid_date_rejected(value):
    with pytest.raises(InvalidInput):
        calculate_bazi_chart(value, 10)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        calculate_bazi_chart(datetime(1990, 5, 15), 99)


def test_chart_is_immutable():
    chart = calculate_bazi_chart(datetime(1990, 5, 15), 10)
    with pytest.raises(AttributeError):
        chart.useful_god = Element.WATER
    assert replace(chart, useful_god=Element.WATER).useful_god == Element.WATER
    assert chart.useful_god == Element.EARTH


def test_to_dict_is_plain_data():
    data = calculate_bazi_chart(datetime(1990, 5, 15), 10).to_dict()
    assert data["pillars"]["day"]["combined"] == "庚午"
    assert data["useful_god"] == "earth"
    assert data["lucky_elements"] == ["earth", "fire"]
    assert data["day_master"]["polarity"] == "yang"
