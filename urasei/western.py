"""
Western tropical astrology engine (stylized approximation).

Handles:
- Approximate ecliptic longitudes for the Sun, Moon and eight planets
- Sign/degree derivation
- Aspect detection between positions
- Birth chart assembly (ascendant, midheaven, equal houses)
- Daily transit energy, moon phase and recommendations

This is NOT an ephemeris. The Sun uses its first-order mean longitude and
every other body is a fixed offset from the Sun plus a linear drift with a
synthetic retrograde window.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from urasei.astro_calendar import (
    DateLike,
    days_since_j2000,
    detect_timezone,
    julian_day,
    to_datetime,
    validate_coordinates,
    validate_timezone,
)
from urasei.errors import LookupMiss

logger = logging.getLogger(__name__)


# ============================================================
# CONSTANTS
# ============================================================

ZODIAC_SIGNS = [
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces"
]

# offset: degrees ahead of the Sun
# speed: degrees per day of drift
# cycle_days: the drift restarts every cycle_days
# retrograde_period: days per synthetic retrograde cycle (None = never)
PLANET_DATA = {
    "Sun": {"symbol": "☉", "offset": 0.0, "speed": 1.0, "cycle_days": None, "retrograde_period": None},
    "Moon": {"symbol": "☽", "offset": 0.0, "speed": 13.2, "cycle_days": 27.3, "retrograde_period": None},
    "Mercury": {"symbol": "☿", "offset": -5.0, "speed": 1.6, "cycle_days": 365, "retrograde_period": 116},
    "Venus": {"symbol": "♀", "offset": 15.0, "speed": 1.2, "cycle_days": 365, "retrograde_period": 584},
    "Mars": {"symbol": "♂", "offset": 45.0, "speed": 0.5, "cycle_days": 365, "retrograde_period": 780},
    "Jupiter": {"symbol": "♃", "offset": 120.0, "speed": 0.08, "cycle_days": 365, "retrograde_period": 399},
    "Saturn": {"symbol": "♄", "offset": 240.0, "speed": 0.03, "cycle_days": 365, "retrograde_period": 378},
    "Uranus": {"symbol": "♅", "offset": 300.0, "speed": 0.01, "cycle_days": 365, "retrograde_period": 370},
    "Neptune": {"symbol": "♆", "offset": 330.0, "speed": 0.006, "cycle_days": 365, "retrograde_period": 367},
    "Pluto": {"symbol": "♇", "offset": 350.0, "speed": 0.004, "cycle_days": 365, "retrograde_period": 366},
}

ASPECT_DATA = {
    "conjunction": {"angle": 0.0, "orb": 10.0, "symbol": "☌"},
    "opposition": {"angle": 180.0, "orb": 10.0, "symbol": "☍"},
    "trine": {"angle": 120.0, "orb": 8.0, "symbol": "△"},
    "square": {"angle": 90.0, "orb": 8.0, "symbol": "□"},
    "sextile": {"angle": 60.0, "orb": 6.0, "symbol": "⚹"},
    "quincunx": {"angle": 150.0, "orb": 3.0, "symbol": "⚻"},
}

MOON_PHASES = [
    "new", "waxing_crescent", "first_quarter", "waxing_gibbous",
    "full", "waning_gibbous", "last_quarter", "waning_crescent",
]

# Mean longitude of the Sun at J2000 and its mean daily motion
SUN_MEAN_LONGITUDE_J2000 = 280.46646
SUN_MEAN_MOTION = 0.9856474

# Tuning constants, not domain law
RETROGRADE_WINDOW = (0.6, 0.9)
RETROGRADE_SPEED_FACTOR = 0.3
TRANSIT_ORB_FACTOR = 0.7
EXACT_ORB = 1.0
MAX_ASPECT_RECOMMENDATIONS = 3

MOON_PHASE_ADVICE = {
    "new": "A perfect time to start something new.",
    "waxing_crescent": "A time to make steady progress towards your goals.",
    "first_quarter": "Your strength to overcome obstacles is rising.",
    "waxing_gibbous": "Your efforts are ready to bear fruit.",
    "full": "Emotions run high and intuition is sharp.",
    "waning_gibbous": "A time to cherish gratitude.",
    "last_quarter": "A time to see clearly what to let go of.",
    "waning_crescent": "A time to turn inward and rest.",
}

# Keyed by the transiting body, then aspect type
ASPECT_ADVICE = {
    "Sun": {
        "conjunction": "Your power of self-expression is growing.",
        "trine": "A day full of creativity and confidence.",
        "square": "A challenge that will carry you past difficulties.",
        "opposition": "A time to look again at your relationships with others.",
        "sextile": "Cooperation and harmony are the key.",
        "quincunx": "Stay flexible and adjust as you go.",
    },
    "Moon": {
        "conjunction": "Feelings and intuition are clear.",
        "trine": "A time of inner peace and healing.",
        "square": "Watch out for emotional ups and downs.",
        "opposition": "Keep your emotions in balance.",
        "sextile": "Treasure your connections with people.",
        "quincunx": "Time to sort through your feelings.",
    },
}


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class PlanetPosition:
    body: str
    sign: str
    degree: float  # [0, 30) within the sign
    absolute_degree: float  # [0, 360) ecliptic longitude
    retrograde: bool
    house: Optional[int] = None

    def to_dict(self):
        return {
            "body": self.body,
            "sign": self.sign,
            "degree": round(self.degree, 4),
            "absolute_degree": round(self.absolute_degree, 4),
            "retrograde": self.retrograde,
            "house": self.house,
        }


@dataclass(frozen=True)
class Aspect:
    body_a: str
    body_b: str
    type: str
    orb: float
    is_exact: bool
    strength: float  # [0, 1]

    def to_dict(self):
        return {
            "body_a": self.body_a,
            "body_b": self.body_b,
            "type": self.type,
            "orb": round(self.orb, 4),
            "is_exact": self.is_exact,
            "strength": round(self.strength, 4),
        }


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    timezone: str


@dataclass(frozen=True)
class BirthChart:
    planets: list
    aspects: list
    ascendant: str
    midheaven: str
    houses: list  # 12 cusp longitudes
    chart_date: datetime
    location: Location
    ascendant_degree: float = 0.0
    midheaven_degree: float = 0.0

    def position_of(self, body: str) -> PlanetPosition:
        for pos in self.planets:
            if pos.body == body:
                return pos
        raise LookupMiss(f"No position for {body!r} in chart")

    def to_dict(self):
        return {
            "chart_date": self.chart_date.isoformat(),
            "location": {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "timezone": self.location.timezone,
            },
            "ascendant": {"sign": self.ascendant, "degree": round(self.ascendant_degree % 30, 1)},
            "midheaven": {"sign": self.midheaven, "degree": round(self.midheaven_degree % 30, 1)},
            "houses": [round(cusp, 4) for cusp in self.houses],
            "planets": [p.to_dict() for p in self.planets],
            "aspects": [a.to_dict() for a in self.aspects],
        }


@dataclass(frozen=True)
class DailyTransit:
    date: datetime
    transiting_planets: list
    significant_aspects: list
    moon_phase: str
    overall_energy: int  # 1-10
    recommendations: list = field(default_factory=list)

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "transiting_planets": [p.to_dict() for p in self.transiting_planets],
            "significant_aspects": [a.to_dict() for a in self.significant_aspects],
            "moon_phase": self.moon_phase,
            "overall_energy": self.overall_energy,
            "recommendations": list(self.recommendations),
        }


# ============================================================
# HELPERS
# ============================================================

def _normalize_angle(angle: float) -> float:
    """Normalize angle to 0-360 range."""
    return angle % 360.0


def _angle_distance(lon1: float, lon2: float) -> float:
    """Shortest angular distance between two longitudes."""
    diff = abs(lon1 - lon2) % 360.0
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def sign_from_degree(longitude: float) -> str:
    """Zodiac sign for an ecliptic longitude (any value, normalized first)."""
    sign_index = int(_normalize_angle(longitude) // 30)
    return ZODIAC_SIGNS[sign_index % 12]


def degree_in_sign(longitude: float) -> float:
    return _normalize_angle(longitude) % 30.0


def make_position(body: str, longitude: float, retrograde: bool = False) -> PlanetPosition:
    longitude = _normalize_angle(longitude)
    return PlanetPosition(
        body=body,
        sign=sign_from_degree(longitude),
        degree=degree_in_sign(longitude),
        absolute_degree=longitude,
        retrograde=retrograde,
    )


def planet_data(body: str) -> dict:
    """Static parameters for a body."""
    try:
        return dict(PLANET_DATA[body])
    except KeyError:
        raise LookupMiss(f"Unknown body: {body!r}. Options: {list(PLANET_DATA)}") from None


def aspect_data(aspect_type: str) -> dict:
    """Ideal angle, orb and symbol for an aspect type."""
    try:
        return dict(ASPECT_DATA[aspect_type])
    except KeyError:
        raise LookupMiss(f"Unknown aspect: {aspect_type!r}. Options: {list(ASPECT_DATA)}") from None


# ============================================================
# PLANETARY POSITIONS
# ============================================================

def sun_longitude(moment: datetime) -> float:
    """
    Mean ecliptic longitude of the Sun.

    First-order approximation with no eccentricity correction; good to a
    couple of degrees at best.
    """
    days = days_since_j2000(moment)
    return _normalize_angle(SUN_MEAN_LONGITUDE_J2000 + SUN_MEAN_MOTION * days)


def is_retrograde(jd: float, retrograde_period: Optional[float]) -> bool:
    """Synthetic retrograde: the middle-late slice of each period."""
    if not retrograde_period:
        return False
    progress = (jd % retrograde_period) / retrograde_period
    start, end = RETROGRADE_WINDOW
    return start < progress < end


def calculate_planet_positions(date: DateLike) -> list[PlanetPosition]:
    """
    Approximate positions for the Sun, Moon and eight planets.

    Args:
        date: datetime, date or ISO string (hours and minutes used)

    Returns:
        One PlanetPosition per body, in PLANET_DATA order.
    """
    moment = to_datetime(date)
    jd = julian_day(moment)
    sun = sun_longitude(moment)

    positions = [make_position("Sun", sun)]

    for body, data in PLANET_DATA.items():
        if body == "Sun":
            continue
        retrograde = is_retrograde(jd, data["retrograde_period"])
        speed = -data["speed"] * RETROGRADE_SPEED_FACTOR if retrograde else data["speed"]
        longitude = sun + data["offset"] + speed * (jd % data["cycle_days"])
        positions.append(make_position(body, longitude, retrograde))

    return positions


# ============================================================
# ASPECT DETECTION
# ============================================================

def match_aspects(pos_a: PlanetPosition, pos_b: PlanetPosition,
                  orb_factor: float = 1.0) -> list[Aspect]:
    """
    Every aspect type whose (scaled) orb admits the separation of two positions.

    Strength falls linearly from 1 at the ideal angle to 0 at the edge of the
    scaled orb.
    """
    distance = _angle_distance(pos_a.absolute_degree, pos_b.absolute_degree)
    found = []

    for aspect_type, data in ASPECT_DATA.items():
        tolerance = data["orb"] * orb_factor
        orb = abs(distance - data["angle"])
        if orb <= tolerance:
            found.append(Aspect(
                body_a=pos_a.body,
                body_b=pos_b.body,
                type=aspect_type,
                orb=orb,
                is_exact=orb <= EXACT_ORB,
                strength=1.0 - orb / tolerance,
            ))

    return found


def calculate_aspects(positions: list[PlanetPosition]) -> list[Aspect]:
    """
    Aspects for every unordered pair of positions, strongest first.
    """
    aspects = []
    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            aspects.extend(match_aspects(positions[i], positions[j]))

    aspects.sort(key=lambda a: a.strength, reverse=True)
    return aspects


# ============================================================
# BIRTH CHART
# ============================================================

def assign_house(planet_lon: float, cusp_longitudes: list[float]) -> int:
    """Determine which house a planet falls in based on cusp longitudes."""
    for i in range(12):
        cusp_start = cusp_longitudes[i]
        cusp_end = cusp_longitudes[(i + 1) % 12]

        if cusp_start < cusp_end:
            if cusp_start <= planet_lon < cusp_end:
                return i + 1
        else:  # wraps around 0°/360°
            if planet_lon >= cusp_start or planet_lon < cusp_end:
                return i + 1
    return 1  # fallback


def ascendant_longitude(birth_hour: int, longitude: float) -> float:
    """
    Rough ascendant: local clock hour shifted by longitude, 15° per hour.
    """
    local_sidereal = (birth_hour + longitude / 15.0) % 24
    return _normalize_angle(local_sidereal * 15.0)


def equal_house_cusps(ascendant: float) -> list[float]:
    """Twelve cusps 30° apart starting at the ascendant (equal houses)."""
    return [_normalize_angle(ascendant + i * 30.0) for i in range(12)]


def generate_birth_chart(birth_date: DateLike, latitude: float, longitude: float,
                         timezone: Optional[str] = None) -> BirthChart:
    """
    Build a natal chart.

    Args:
        birth_date: birth moment (local clock time)
        latitude: geographic latitude (north positive)
        longitude: geographic longitude (east positive)
        timezone: IANA zone name; detected from the coordinates when None

    Raises:
        InvalidInput: bad date, coordinates or timezone
    """
    moment = to_datetime(birth_date)
    latitude, longitude = validate_coordinates(latitude, longitude)
    if timezone is None:
        timezone = detect_timezone(latitude, longitude)
    else:
        timezone = validate_timezone(timezone)

    asc = ascendant_longitude(moment.hour, longitude)
    mc = _normalize_angle(asc + 90.0)
    cusps = equal_house_cusps(asc)

    positions = [
        replace(pos, house=assign_house(pos.absolute_degree, cusps))
        for pos in calculate_planet_positions(moment)
    ]
    aspects = calculate_aspects(positions)

    logger.debug("Birth chart %s: asc=%.2f %s, %d aspects",
                 moment.isoformat(), asc, sign_from_degree(asc), len(aspects))

    return BirthChart(
        planets=positions,
        aspects=aspects,
        ascendant=sign_from_degree(asc),
        midheaven=sign_from_degree(mc),
        houses=cusps,
        chart_date=moment,
        location=Location(latitude, longitude, timezone),
        ascendant_degree=asc,
        midheaven_degree=mc,
    )


# ============================================================
# DAILY TRANSIT
# ============================================================

def moon_phase(separation: float) -> str:
    """Eight 45° slices of the Moon-minus-Sun angle, starting at new."""
    return MOON_PHASES[int(_normalize_angle(separation) // 45) % 8]


def overall_energy(aspects: list[Aspect]) -> int:
    """Sum of aspect strengths mapped onto 1-10 (3 with no aspects)."""
    total = sum(a.strength for a in aspects)
    # round half up
    return min(10, max(1, math.floor(total * 2 + 3 + 0.5)))


def aspect_advice(aspect: Aspect) -> Optional[str]:
    return ASPECT_ADVICE.get(aspect.body_a, {}).get(aspect.type)


def generate_recommendations(aspects: list[Aspect], phase: str) -> list[str]:
    """
    One moon-phase sentence, then advice for up to three of the strongest
    aspects. Aspects with no advice entry are skipped.
    """
    recommendations = [MOON_PHASE_ADVICE[phase]]
    for aspect in aspects[:MAX_ASPECT_RECOMMENDATIONS]:
        advice = aspect_advice(aspect)
        if advice:
            recommendations.append(advice)
    return recommendations


def calculate_daily_transit(birth_chart: BirthChart, target_date: DateLike) -> DailyTransit:
    """
    Transits for a date against a natal chart.

    Transit aspects use orbs scaled by TRANSIT_ORB_FACTOR, and strength is
    measured against that tighter orb.
    """
    moment = to_datetime(target_date)
    transit_positions = calculate_planet_positions(moment)

    significant = []
    for transit in transit_positions:
        for natal in birth_chart.planets:
            significant.extend(match_aspects(transit, natal, TRANSIT_ORB_FACTOR))
    significant.sort(key=lambda a: a.strength, reverse=True)

    by_body = {p.body: p for p in transit_positions}
    phase = moon_phase(by_body["Moon"].absolute_degree - by_body["Sun"].absolute_degree)
    energy = overall_energy(significant)

    logger.debug("Transit %s: %d aspects, phase=%s, energy=%d",
                 moment.date().isoformat(), len(significant), phase, energy)

    return DailyTransit(
        date=moment,
        transiting_planets=transit_positions,
        significant_aspects=significant,
        moon_phase=phase,
        overall_energy=energy,
        recommendations=generate_recommendations(significant, phase),
    )


if __name__ == "__main__":
    chart = generate_birth_chart(datetime(1990, 5, 15, 10, 30), 35.6762, 139.6503, "Asia/Tokyo")

    print(f"Ascendant: {chart.ascendant}  Midheaven: {chart.midheaven}")
    for pos in chart.planets:
        retro = " R" if pos.retrograde else ""
        print(f"  {pos.body:8s}: {pos.degree:5.2f}° {pos.sign}{retro} (house {pos.house})")

    print("\nTightest natal aspects:")
    for asp in chart.aspects[:8]:
        print(f"  {asp.body_a:8s} {asp.type:11s} {asp.body_b:8s} (orb {asp.orb:.1f}°, strength {asp.strength:.2f})")

    transit = calculate_daily_transit(chart, datetime(2026, 2, 15, 12, 0))
    print(f"\nMoon phase: {transit.moon_phase}  Energy: {transit.overall_energy}")
    for rec in transit.recommendations:
        print(f"  - {rec}")
