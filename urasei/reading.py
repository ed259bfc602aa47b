"""
BaZi reading text and lucky attributes.

Every field is a pure function of the chart. Lookups that miss return a
fixed fallback instead of raising.
"""

import logging
from dataclasses import dataclass

from urasei.bazi import STRENGTH_THRESHOLD, BaziChart, Element, Polarity

logger = logging.getLogger(__name__)

# Average element weight above which the chart counts as balanced
BALANCE_THRESHOLD = 2.0


@dataclass(frozen=True)
class BaziReading:
    chart: BaziChart
    personality: str
    career: str
    relationships: str
    health: str
    wealth: str
    overall: str
    advice: str
    lucky_colors: list
    lucky_numbers: list
    lucky_directions: list

    def to_dict(self):
        return {
            "chart": self.chart.to_dict(),
            "personality": self.personality,
            "career": self.career,
            "relationships": self.relationships,
            "health": self.health,
            "wealth": self.wealth,
            "overall": self.overall,
            "advice": self.advice,
            "lucky_colors": list(self.lucky_colors),
            "lucky_numbers": list(self.lucky_numbers),
            "lucky_directions": list(self.lucky_directions),
        }


# ============================================================
# TEXT TABLES
# ============================================================

PERSONALITY_TEXT = {
    (Element.WOOD, Polarity.YANG): "Driven and ambitious, a natural leader. Creative, and happiest when taking on something new.",
    (Element.WOOD, Polarity.YIN): "Flexible and cooperative. Has an artistic eye and a love of beautiful things.",
    (Element.FIRE, Polarity.YANG): "Passionate and energetic, bright and sociable. Expressive, with a warmth that draws people in.",
    (Element.FIRE, Polarity.YIN): "Thoughtful and perceptive. Intellectual, with a gift for seeing to the heart of things.",
    (Element.EARTH, Polarity.YANG): "Steady and responsible. Patient, and sees things through to the end.",
    (Element.EARTH, Polarity.YIN): "Careful and caring, a support to others. Good at creating a safe, homely environment.",
    (Element.METAL, Polarity.YANG): "Strong-willed with a keen sense of justice. Decisive, and brave in difficult situations.",
    (Element.METAL, Polarity.YIN): "Refined and delicate, with a fine aesthetic sense. Talented at detailed and technical work.",
    (Element.WATER, Polarity.YANG): "Fluid and adaptable. Resourceful, and responds flexibly to whatever comes.",
    (Element.WATER, Polarity.YIN): "A deep thinker with strong intuition. Drawn to the mysterious and values the spiritual.",
}
PERSONALITY_FALLBACK = "A one-of-a-kind personality."

CAREER_TEXT = {
    Element.WOOD: "Talents shine in education, publishing, environmental work, forestry and architectural design.",
    Element.FIRE: "Well suited to entertainment, advertising, IT, electrical work and cooking.",
    Element.EARTH: "Success comes in stable fields such as real estate, agriculture, construction, medicine and insurance.",
    Element.METAL: "Strong in finance, manufacturing, machinery, jewellery and law.",
    Element.WATER: "Suited to logistics, trade, fisheries, cleaning services and academic research.",
}
CAREER_FALLBACK = "Could thrive in many different fields."

RELATIONSHIP_TEXT = {
    Polarity.YANG: "Tends to make the first move. Looks for understanding and generosity in a partner.",
    Polarity.YIN: "Builds relationships carefully. Values deep bonds and a spiritual connection.",
}
RELATIONSHIP_FALLBACK = "Relationships grow at their own pace."

HEALTH_TEXT = {
    Element.WOOD: "Look after the liver and muscles. Try not to let stress build up.",
    Element.FIRE: "Look after the heart, circulation and eyes. Avoid overexcitement.",
    Element.EARTH: "Look after digestion and muscles. Keep regular eating habits.",
    Element.METAL: "Look after the lungs and skin. Guard against dryness.",
    Element.WATER: "Look after the kidneys, reproductive system and bones. Avoid getting chilled.",
}
HEALTH_FALLBACK = "Generally blessed with good health."

WEALTH_STRONG = "Finances are stable. Planned investment and saving will build assets."
WEALTH_WEAK = "Effort opens the way to wealth, and helpful partners can be expected."

OVERALL_BALANCED = "The five elements are fairly well balanced, pointing to a stable path through life."
OVERALL_FOCUSED = "Likely to show outstanding talent in one particular area."

ADVICE_TEMPLATE = (
    "Living with your useful element, {element}, in mind will lift your fortune. "
    "Bring {element} into your colours, directions and food."
)

LUCKY_COLORS = {
    Element.WOOD: ["green", "teal", "blue"],
    Element.FIRE: ["red", "pink", "orange"],
    Element.EARTH: ["yellow", "beige", "brown"],
    Element.METAL: ["white", "silver", "gold"],
    Element.WATER: ["black", "navy", "deep purple"],
}
LUCKY_COLORS_FALLBACK = ["white"]

LUCKY_NUMBERS = {
    Element.WOOD: [3, 4, 8],
    Element.FIRE: [2, 7, 9],
    Element.EARTH: [5, 6, 0],
    Element.METAL: [4, 9, 1],
    Element.WATER: [1, 6, 7],
}
LUCKY_NUMBERS_FALLBACK = [8]

LUCKY_DIRECTIONS = {
    Element.WOOD: ["east", "southeast"],
    Element.FIRE: ["south"],
    Element.EARTH: ["center", "southwest", "northeast"],
    Element.METAL: ["west", "northwest"],
    Element.WATER: ["north"],
}
LUCKY_DIRECTIONS_FALLBACK = ["east"]


def _lookup(table: dict, key, fallback, field: str):
    try:
        return table[key]
    except KeyError:
        logger.warning("No %s entry for %r, using fallback", field, key)
        return fallback


# ============================================================
# FIELD GENERATORS
# ============================================================

def personality_reading(chart: BaziChart) -> str:
    key = (chart.day_master_element, chart.day_master_polarity)
    return _lookup(PERSONALITY_TEXT, key, PERSONALITY_FALLBACK, "personality")


def career_reading(chart: BaziChart) -> str:
    return _lookup(CAREER_TEXT, chart.useful_god, CAREER_FALLBACK, "career")


def relationship_reading(chart: BaziChart) -> str:
    return _lookup(RELATIONSHIP_TEXT, chart.day_master_polarity, RELATIONSHIP_FALLBACK, "relationship")


def health_reading(chart: BaziChart) -> str:
    return _lookup(HEALTH_TEXT, chart.avoid_god, HEALTH_FALLBACK, "health")


def wealth_reading(chart: BaziChart) -> str:
    if chart.strength.get("self", 0.0) > STRENGTH_THRESHOLD:
        return WEALTH_STRONG
    return WEALTH_WEAK


def overall_reading(chart: BaziChart) -> str:
    # Four pillars always weigh 6.0 in total, so this average is 1.2
    balance = sum(chart.elements.values()) / 5
    if balance > BALANCE_THRESHOLD:
        return OVERALL_BALANCED
    return OVERALL_FOCUSED


def advice_reading(chart: BaziChart) -> str:
    return ADVICE_TEMPLATE.format(element=chart.useful_god.value)


def lucky_colors(element: Element) -> list:
    return list(_lookup(LUCKY_COLORS, element, LUCKY_COLORS_FALLBACK, "lucky colour"))


def lucky_numbers(element: Element) -> list:
    return list(_lookup(LUCKY_NUMBERS, element, LUCKY_NUMBERS_FALLBACK, "lucky number"))


def lucky_directions(element: Element) -> list:
    return list(_lookup(LUCKY_DIRECTIONS, element, LUCKY_DIRECTIONS_FALLBACK, "lucky direction"))


def generate_bazi_reading(chart: BaziChart) -> BaziReading:
    """Derive the full reading for a chart."""
    return BaziReading(
        chart=chart,
        personality=personality_reading(chart),
        career=career_reading(chart),
        relationships=relationship_reading(chart),
        health=health_reading(chart),
        wealth=wealth_reading(chart),
        overall=overall_reading(chart),
        advice=advice_reading(chart),
        lucky_colors=lucky_colors(chart.useful_god),
        lucky_numbers=lucky_numbers(chart.useful_god),
        lucky_directions=lucky_directions(chart.useful_god),
    )
