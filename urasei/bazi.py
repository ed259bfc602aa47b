"""
BaZi (Four Pillars of Destiny) computation engine.

Handles:
- Static stem/branch/element tables
- Gregorian date + hour to the four pillars (fixed-table calendar offsets)
- Element distribution across the pillars
- Day Master strength and useful/avoid element selection

The model is deliberately simplified: hidden stems, seasonal strength and
branch combinations/clashes are not taken into account.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from urasei.astro_calendar import (
    LI_CHUN,
    DateLike,
    julian_day_number,
    month_cutoff_day,
    to_datetime,
    validate_hour,
)

logger = logging.getLogger(__name__)


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element
    index: int  # 0-11 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.animal})"


@dataclass(frozen=True)
class Pillar:
    stem: HeavenlyStem
    branch: EarthlyBranch
    position: str  # "year", "month", "day", "hour"

    @property
    def stem_element(self) -> Element:
        return self.stem.element

    @property
    def branch_element(self) -> Element:
        return self.branch.element

    @property
    def polarity(self) -> Polarity:
        return self.stem.polarity

    def __str__(self):
        return f"{self.stem.pinyin} {self.branch.pinyin} ({self.polarity.value} {self.stem_element.value} {self.branch.animal})"

    def to_dict(self):
        return {
            "position": self.position,
            "stem": {
                "chinese": self.stem.chinese,
                "pinyin": self.stem.pinyin,
                "index": self.stem.index,
            },
            "branch": {
                "chinese": self.branch.chinese,
                "pinyin": self.branch.pinyin,
                "animal": self.branch.animal,
                "index": self.branch.index,
            },
            "stem_element": self.stem_element.value,
            "branch_element": self.branch_element.value,
            "polarity": self.polarity.value,
            "combined": f"{self.stem.chinese}{self.branch.chinese}",
            "description": str(self),
        }


@dataclass(frozen=True)
class BaziChart:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar
    day_master: HeavenlyStem
    day_master_element: Element
    day_master_polarity: Polarity
    elements: dict  # element value -> weighted count
    strength: dict  # elements plus synthetic "self" and "control"
    useful_god: Element
    avoid_god: Element
    lucky_elements: list
    unlucky_elements: list

    @property
    def pillars(self) -> list[Pillar]:
        return [self.year, self.month, self.day, self.hour]

    def to_dict(self):
        return {
            "pillars": {p.position: p.to_dict() for p in self.pillars},
            "day_master": {
                "stem": self.day_master.pinyin,
                "chinese": self.day_master.chinese,
                "element": self.day_master_element.value,
                "polarity": self.day_master_polarity.value,
                "description": str(self.day_master),
            },
            "elements": dict(self.elements),
            "strength": dict(self.strength),
            "useful_god": self.useful_god.value,
            "avoid_god": self.avoid_god.value,
            "lucky_elements": [e.value for e in self.lucky_elements],
            "unlucky_elements": [e.value for e in self.unlucky_elements],
        }


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = [
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
]

EARTHLY_BRANCHES = [
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, 0),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, 1),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, 2),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, 3),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, 4),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, 5),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, 6),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, 7),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, 8),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, 9),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, 10),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, 11),
]

# Lookup helpers
STEM_BY_CHINESE = {s.chinese: s for s in HEAVENLY_STEMS}
STEM_BY_PINYIN = {s.pinyin: s for s in HEAVENLY_STEMS}
BRANCH_BY_CHINESE = {b.chinese: b for b in EARTHLY_BRANCHES}

# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

# Control cycle: Wood → Earth → Water → Fire → Metal → Wood
CONTROL_CYCLE = {
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
}


# ============================================================
# CALENDAR CONSTANTS
# ============================================================

# Year known to be Jia Zi (stem 0, branch 0)
BAZI_REFERENCE_YEAR = 1984

# Day counted as Jia Zi for the day pillar offset
DAY_PILLAR_REFERENCE = date(1900, 1, 1)

# Month stem by (year stem index mod 5, BaZi month index 0-11)
MONTH_STEM_TABLE = [
    [2, 4, 6, 8, 0, 2, 4, 6, 8, 0, 2, 4],  # Jia/Ji years
    [4, 6, 8, 0, 2, 4, 6, 8, 0, 2, 4, 6],  # Yi/Geng years
    [6, 8, 0, 2, 4, 6, 8, 0, 2, 4, 6, 8],  # Bing/Xin years
    [8, 0, 2, 4, 6, 8, 0, 2, 4, 6, 8, 0],  # Ding/Ren years
    [0, 2, 4, 6, 8, 0, 2, 4, 6, 8, 0, 2],  # Wu/Gui years
]

# Hour stem by (day stem index mod 5, hour branch index 0-11)
HOUR_STEM_TABLE = [
    [0, 2, 4, 6, 8, 0, 2, 4, 6, 8, 0, 2],  # Jia/Ji days
    [2, 4, 6, 8, 0, 2, 4, 6, 8, 0, 2, 4],  # Yi/Geng days
    [4, 6, 8, 0, 2, 4, 6, 8, 0, 2, 4, 6],  # Bing/Xin days
    [6, 8, 0, 2, 4, 6, 8, 0, 2, 4, 6, 8],  # Ding/Ren days
    [8, 0, 2, 4, 6, 8, 0, 2, 4, 6, 8, 0],  # Wu/Gui days
]

# Tuning constants, not domain law
STRENGTH_THRESHOLD = 2.5
STEM_WEIGHT = 1.0
BRANCH_WEIGHT = 0.5
SUPPORT_WEIGHT = 0.5


# ============================================================
# PILLAR COMPUTATION
# ============================================================

def year_pillar(moment: datetime) -> Pillar:
    """
    Compute the Year Pillar.

    The BaZi year starts at Li Chun (fixed at Feb 4 here). Dates before it
    belong to the previous year's pillar.
    """
    li_chun_month, li_chun_day = LI_CHUN
    effective_year = moment.year
    if moment.month < li_chun_month or (moment.month == li_chun_month and moment.day < li_chun_day):
        effective_year -= 1

    offset = (effective_year - BAZI_REFERENCE_YEAR) % 60
    stem_index = offset % 10
    branch_index = offset % 12

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="year",
    )


def bazi_month(moment: datetime) -> int:
    """Civil month shifted back by one before that month's first solar term."""
    month = moment.month
    cutoff = month_cutoff_day(month)
    if cutoff is not None and moment.day < cutoff:
        return 12 if month == 1 else month - 1
    return month


def month_pillar(moment: datetime, year_stem_index: int) -> Pillar:
    """
    Compute the Month Pillar.

    BaZi month 1 sits on the Tiger branch (index 2); the stem comes from
    MONTH_STEM_TABLE keyed by the year stem's group of five.
    """
    month = bazi_month(moment)
    month_index = month - 1
    stem_index = MONTH_STEM_TABLE[year_stem_index % 5][month_index]
    branch_index = (month + 1) % 12

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="month",
    )


def day_pillar(moment: datetime) -> Pillar:
    """
    Compute the Day Pillar.

    Pure offset from DAY_PILLAR_REFERENCE in whole days, taken from the
    Julian Day Number of each civil date.
    """
    days = julian_day_number(moment) - julian_day_number(DAY_PILLAR_REFERENCE)
    stem_index = days % 10
    branch_index = days % 12

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="day",
    )


def hour_branch_index(hour: int) -> int:
    """
    Two-hour blocks (shi chen):
    23:00-00:59 = Zi (0), 01:00-02:59 = Chou (1), ... 21:00-22:59 = Hai (11)
    """
    return ((hour + 1) // 2) % 12


def hour_pillar(hour: int, day_stem_index: int) -> Pillar:
    """Compute the Hour Pillar, stem keyed off the day stem's group of five."""
    branch_index = hour_branch_index(hour)
    stem_index = HOUR_STEM_TABLE[day_stem_index % 5][branch_index]

    return Pillar(
        stem=HEAVENLY_STEMS[stem_index],
        branch=EARTHLY_BRANCHES[branch_index],
        position="hour",
    )


# ============================================================
# ELEMENT ANALYSIS
# ============================================================

def supporting_element(element: Element) -> Optional[Element]:
    """The element that produces ``element`` (inverse production lookup)."""
    for source, target in PRODUCTION_CYCLE.items():
        if target == element:
            return source
    return None


def element_distribution(pillars: list[Pillar]) -> dict:
    """
    Weighted element counts across the pillars.

    Visible stems weigh 1.0, branches 0.5 (stand-in for their hidden stems).
    Four pillars always total 6.0.
    """
    distribution = {e.value: 0.0 for e in Element}

    for pillar in pillars:
        distribution[pillar.stem_element.value] += STEM_WEIGHT
        distribution[pillar.branch_element.value] += BRANCH_WEIGHT

    return distribution


def analyze_strength(day_master: HeavenlyStem, elements: dict) -> dict:
    """
    Element counts plus two synthetic keys:

    - ``self``: the Day Master's element, boosted by half its supporting element
    - ``control``: the count of the Day Master element's control-cycle target
    """
    dm_element = day_master.element
    strength = dict(elements)

    support = supporting_element(dm_element)
    support_strength = elements.get(support.value, 0.0) if support else 0.0

    control = CONTROL_CYCLE.get(dm_element)
    control_strength = elements.get(control.value, 0.0) if control else 0.0

    strength["self"] = elements.get(dm_element.value, 0.0) + support_strength * SUPPORT_WEIGHT
    strength["control"] = control_strength
    return strength


def determine_useful_god(day_master: HeavenlyStem, elements: dict) -> tuple[Element, Element]:
    """
    Pick the (useful, avoid) elements for a Day Master.

    Strong Day Master: drain it with the element it produces; avoid its own.
    Weak Day Master: support it with the element that produces it; avoid
    its control-cycle target.
    """
    dm_element = day_master.element
    strength = analyze_strength(day_master, elements)

    if strength["self"] > STRENGTH_THRESHOLD:
        useful = PRODUCTION_CYCLE.get(dm_element) or CONTROL_CYCLE[dm_element]
        avoid = dm_element
    else:
        useful = supporting_element(dm_element) or dm_element
        avoid = CONTROL_CYCLE[dm_element]

    return useful, avoid


# ============================================================
# FULL CHART COMPUTATION
# ============================================================

def calculate_bazi_chart(birth_date: DateLike, birth_hour: int) -> BaziChart:
    """
    Compute a BaZi chart from a civil birth date and clock hour.

    Args:
        birth_date: datetime, date or ISO string (date portion used)
        birth_hour: hour in 24h format, 0-23

    Raises:
        InvalidInput: malformed date or hour outside [0, 23]
    """
    moment = to_datetime(birth_date)
    hour = validate_hour(birth_hour)

    yp = year_pillar(moment)
    mp = month_pillar(moment, yp.stem.index)
    dp = day_pillar(moment)
    hp = hour_pillar(hour, dp.stem.index)

    pillars = [yp, mp, dp, hp]
    day_master = dp.stem

    elements = element_distribution(pillars)
    strength = analyze_strength(day_master, elements)
    useful, avoid = determine_useful_god(day_master, elements)

    lucky = [useful]
    useful_support = supporting_element(useful)
    if useful_support:
        lucky.append(useful_support)
    unlucky = [avoid]

    logger.debug(
        "BaZi %s h%d: %s | elements=%s self=%.2f useful=%s avoid=%s",
        moment.date().isoformat(), hour,
        " / ".join(p.stem.chinese + p.branch.chinese for p in pillars),
        elements, strength["self"], useful.value, avoid.value,
    )

    return BaziChart(
        year=yp,
        month=mp,
        day=dp,
        hour=hp,
        day_master=day_master,
        day_master_element=day_master.element,
        day_master_polarity=day_master.polarity,
        elements=elements,
        strength=strength,
        useful_god=useful,
        avoid_god=avoid,
        lucky_elements=lucky,
        unlucky_elements=unlucky,
    )


if __name__ == "__main__":
    chart = calculate_bazi_chart(datetime(1990, 5, 15), 10)

    print(f"Day Master: {chart.day_master}")
    for p in chart.pillars:
        print(f"  {p.position.capitalize():6s}: {p.stem.chinese}{p.branch.chinese}  {p}")

    print("\nElement Distribution:")
    for element, weight in sorted(chart.elements.items(), key=lambda x: -x[1]):
        bar = "█" * int(weight * 4)
        print(f"  {element:6s}: {weight:.1f} {bar}")

    print(f"\nUseful: {chart.useful_god.value}  Avoid: {chart.avoid_god.value}")
