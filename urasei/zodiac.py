"""
Sun-sign detection and sign-to-sign compatibility.
"""

import logging
import random
from datetime import date
from typing import Optional

from urasei.astro_calendar import DateLike, to_datetime
from urasei.errors import InvalidInput
from urasei.western import ZODIAC_SIGNS

logger = logging.getLogger(__name__)


# Last (month, day) of each sign, in calendar order from Capricorn's
# January tail. A date on or before the boundary belongs to the sign.
SIGN_BOUNDARIES = [
    ((1, 19), "Capricorn"),
    ((2, 18), "Aquarius"),
    ((3, 20), "Pisces"),
    ((4, 19), "Aries"),
    ((5, 20), "Taurus"),
    ((6, 21), "Gemini"),
    ((7, 22), "Cancer"),
    ((8, 22), "Leo"),
    ((9, 22), "Virgo"),
    ((10, 23), "Libra"),
    ((11, 22), "Scorpio"),
    ((12, 21), "Sagittarius"),
    ((12, 31), "Capricorn"),
]

SIGN_DATA = {
    "Aries": {
        "symbol": "♈", "period": "3/21-4/19", "element": "fire",
        "best": ["Leo", "Sagittarius"], "good": ["Gemini", "Aquarius"],
        "challenging": ["Libra", "Pisces"],
    },
    "Taurus": {
        "symbol": "♉", "period": "4/20-5/20", "element": "earth",
        "best": ["Virgo", "Capricorn"], "good": ["Cancer", "Pisces"],
        "challenging": ["Aries", "Scorpio"],
    },
    "Gemini": {
        "symbol": "♊", "period": "5/21-6/21", "element": "air",
        "best": ["Libra", "Aquarius"], "good": ["Aries", "Leo"],
        "challenging": ["Sagittarius", "Pisces"],
    },
    "Cancer": {
        "symbol": "♋", "period": "6/22-7/22", "element": "water",
        "best": ["Scorpio", "Pisces"], "good": ["Taurus", "Virgo"],
        "challenging": ["Capricorn", "Aquarius"],
    },
    "Leo": {
        "symbol": "♌", "period": "7/23-8/22", "element": "fire",
        "best": ["Aries", "Sagittarius"], "good": ["Gemini", "Libra"],
        "challenging": ["Aquarius", "Pisces"],
    },
    "Virgo": {
        "symbol": "♍", "period": "8/23-9/22", "element": "earth",
        "best": ["Taurus", "Capricorn"], "good": ["Cancer", "Scorpio"],
        "challenging": ["Libra", "Pisces"],
    },
    "Libra": {
        "symbol": "♎", "period": "9/23-10/23", "element": "air",
        "best": ["Gemini", "Aquarius"], "good": ["Leo", "Sagittarius"],
        "challenging": ["Aries", "Pisces"],
    },
    "Scorpio": {
        "symbol": "♏", "period": "10/24-11/22", "element": "water",
        "best": ["Cancer", "Pisces"], "good": ["Virgo", "Capricorn"],
        "challenging": ["Taurus", "Aquarius"],
    },
    "Sagittarius": {
        "symbol": "♐", "period": "11/23-12/21", "element": "fire",
        "best": ["Aries", "Leo"], "good": ["Libra", "Aquarius"],
        "challenging": ["Gemini", "Pisces"],
    },
    "Capricorn": {
        "symbol": "♑", "period": "12/22-1/19", "element": "earth",
        "best": ["Taurus", "Virgo"], "good": ["Scorpio", "Pisces"],
        "challenging": ["Cancer", "Aquarius"],
    },
    "Aquarius": {
        "symbol": "♒", "period": "1/20-2/18", "element": "air",
        "best": ["Gemini", "Libra"], "good": ["Aries", "Sagittarius"],
        "challenging": ["Leo", "Pisces"],
    },
    "Pisces": {
        "symbol": "♓", "period": "2/19-3/20", "element": "water",
        "best": ["Cancer", "Scorpio"], "good": ["Taurus", "Capricorn"],
        "challenging": ["Aries", "Aquarius"],
    },
}

# tier -> (lowest score, highest score)
COMPATIBILITY_BANDS = {
    "best": (85, 99),
    "good": (70, 84),
    "normal": (55, 69),
    "challenging": (40, 54),
}

COMPATIBILITY_TEXT = {
    "best": (
        "{user} and {partner} are a perfect match! Your natures fit together beautifully "
        "and can build a wonderful partnership.",
        "Being yourselves deepens the bond. Praise each other's strengths often.",
    ),
    "good": (
        "{user} and {partner} get along well. Understanding each other leads to a fulfilling relationship.",
        "Value communication and respect each other's values; that is the key to growing together.",
    ),
    "normal": (
        "{user} and {partner} are an ordinary match. With effort on both sides you can build something lovely.",
        "Look for the good in your partner and engage actively to grow closer.",
    ),
    "challenging": (
        "{user} and {partner} are a somewhat challenging pair. Accepting your differences lets you grow together.",
        "Don't see differences as negatives. Learning from each other makes for a unique, stimulating bond.",
    ),
}


def _check_sign(sign: str) -> str:
    if sign not in SIGN_DATA:
        raise InvalidInput(f"Unknown zodiac sign: {sign!r}. Options: {ZODIAC_SIGNS}")
    return sign


def sun_sign(month: int, day: int) -> str:
    """
    Sun sign for a birth month and day (fixed boundary dates).

    Raises:
        InvalidInput: for a month/day that does not exist (Feb 29 is allowed)
    """
    try:
        # leap year so Feb 29 validates
        date(2000, month, day)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"Invalid birth month/day: {month}/{day}") from e

    for (end_month, end_day), sign in SIGN_BOUNDARIES:
        if (month, day) <= (end_month, end_day):
            return sign
    return "Capricorn"


def sign_for_date(value: DateLike) -> str:
    moment = to_datetime(value)
    return sun_sign(moment.month, moment.day)


def sign_info(sign: str) -> dict:
    """Master data for a sign."""
    data = dict(SIGN_DATA[_check_sign(sign)])
    data["sign"] = sign
    return data


def compatibility_tier(user_sign: str, partner_sign: str) -> str:
    data = SIGN_DATA[_check_sign(user_sign)]
    _check_sign(partner_sign)
    for tier in ("best", "good", "challenging"):
        if partner_sign in data[tier]:
            return tier
    return "normal"


def calculate_compatibility(user_sign: str, partner_sign: str,
                            rng: Optional[random.Random] = None) -> dict:
    """
    Compatibility between two sun signs, judged from the user's side.

    The score is drawn from the tier's band; pass a seeded ``rng`` for
    repeatable results.

    Returns:
        dict with tier, compatibility (score), analysis, advice
    """
    tier = compatibility_tier(user_sign, partner_sign)
    low, high = COMPATIBILITY_BANDS[tier]
    score = (rng or random).randint(low, high)
    analysis, advice = COMPATIBILITY_TEXT[tier]

    logger.debug("Compatibility %s/%s: %s %d", user_sign, partner_sign, tier, score)

    return {
        "user_sign": user_sign,
        "partner_sign": partner_sign,
        "tier": tier,
        "compatibility": score,
        "analysis": analysis.format(user=user_sign, partner=partner_sign),
        "advice": advice,
    }
