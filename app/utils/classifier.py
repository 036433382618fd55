"""
Place Classifier
Maps OpenStreetMap-style tags onto the internal category and tag taxonomy.

Categories are decided by CATEGORY_RULES, tried in declared order: the first
category with a matching condition wins, so the order of that tuple is part of
the behaviour. Display tags come from TAG_TABLE and do not depend on the
category that was picked.
"""
from typing import Dict, List, NamedTuple, Optional, Set, Tuple

from app.models.places import CategoryEnum, RawRecord, TagEnum

WILDCARD = "*"


class MatchCondition(NamedTuple):
    """A native key plus an exact value or `a|b|c` alternation (`*` = any)."""
    key: str
    pattern: str

    def matches(self, tags: Dict[str, str]) -> bool:
        value = tags.get(self.key)
        if value is None:
            return False
        if self.pattern == WILDCARD:
            return True
        return value in self.pattern.split("|")


# Declared order matters: temple beats beach beats peak beats castle, etc.
CATEGORY_RULES: Tuple[Tuple[CategoryEnum, Tuple[MatchCondition, ...]], ...] = (
    (CategoryEnum.TEMPLE, (
        MatchCondition("amenity", "place_of_worship"),
        MatchCondition("building", "temple|church|mosque"),
        MatchCondition("historic", "temple"),
    )),
    (CategoryEnum.BEACH, (
        MatchCondition("natural", "beach"),
        MatchCondition("highway", "beach"),
        MatchCondition("leisure", "beach_resort"),
    )),
    (CategoryEnum.PEAK, (
        MatchCondition("natural", "peak|hill|volcano"),
    )),
    (CategoryEnum.CASTLE, (
        MatchCondition("historic", "castle|fort|palace|ruins|monument"),
    )),
    (CategoryEnum.PARK, (
        MatchCondition("leisure", "park|garden"),
    )),
    (CategoryEnum.WILDLIFE, (
        MatchCondition("tourism", "zoo"),
        MatchCondition("leisure", "nature_reserve"),
        MatchCondition("boundary", "national_park|protected_area"),
    )),
    (CategoryEnum.WATERFALL, (
        MatchCondition("waterway", "waterfall"),
        MatchCondition("natural", "waterfall"),
    )),
    (CategoryEnum.MUSEUM, (
        MatchCondition("tourism", "museum|gallery"),
    )),
    (CategoryEnum.VILLAGE, (
        MatchCondition("place", "village|hamlet"),
    )),
)

# (native key, native value) -> display tag; WILDCARD matches any value
TAG_TABLE: Dict[Tuple[str, str], TagEnum] = {
    ("tourism", "attraction"): TagEnum.ADVENTURE,
    ("tourism", "museum"): TagEnum.HISTORY,
    ("tourism", "gallery"): TagEnum.CULTURE,
    ("tourism", "zoo"): TagEnum.WILDLIFE,
    ("tourism", "viewpoint"): TagEnum.NATURE,
    ("tourism", "theme_park"): TagEnum.RECREATION,
    ("amenity", "place_of_worship"): TagEnum.CULTURE,
    ("building", "temple"): TagEnum.CULTURE,
    ("highway", "beach"): TagEnum.RELAXATION,
    ("natural", "beach"): TagEnum.RELAXATION,
    ("leisure", "beach_resort"): TagEnum.RELAXATION,
    ("natural", "peak"): TagEnum.NATURE,
    ("natural", "hill"): TagEnum.NATURE,
    ("natural", "waterfall"): TagEnum.NATURE,
    ("waterway", "waterfall"): TagEnum.NATURE,
    ("leisure", "park"): TagEnum.NATURE,
    ("leisure", "garden"): TagEnum.NATURE,
    ("leisure", "nature_reserve"): TagEnum.WILDLIFE,
    ("boundary", "national_park"): TagEnum.NATURE,
    ("attraction", "animal"): TagEnum.WILDLIFE,
    ("zoo", WILDCARD): TagEnum.WILDLIFE,
    ("historic", WILDCARD): TagEnum.HISTORY,
    ("heritage", WILDCARD): TagEnum.HISTORY,
    ("place", "village"): TagEnum.VILLAGE,
    ("place", "hamlet"): TagEnum.VILLAGE,
    ("sport", WILDCARD): TagEnum.RECREATION,
    ("leisure", "water_park"): TagEnum.RECREATION,
}


def conditions_for(category: Optional[CategoryEnum] = None) -> List[MatchCondition]:
    """
    Return the match conditions used to query a provider.

    Args:
        category: Restrict to one category; None or OTHER means all categories.

    Returns:
        List of conditions in declared order
    """
    conditions: List[MatchCondition] = []
    for rule_category, rule_conditions in CATEGORY_RULES:
        if category in (None, CategoryEnum.OTHER) or rule_category == category:
            conditions.extend(rule_conditions)
    return conditions


def classify_category(tags: Dict[str, str]) -> CategoryEnum:
    """First category (in CATEGORY_RULES order) with a satisfied condition."""
    for category, conditions in CATEGORY_RULES:
        if any(condition.matches(tags) for condition in conditions):
            return category
    return CategoryEnum.OTHER


def derive_tags(tags: Dict[str, str]) -> Set[TagEnum]:
    """Collect every display tag the record's (key, value) pairs map to."""
    derived: Set[TagEnum] = set()
    if not tags:
        return derived

    for key, value in tags.items():
        tag = TAG_TABLE.get((key, value)) or TAG_TABLE.get((key, WILDCARD))
        if tag:
            derived.add(tag)

    return derived


def has_mandatory_fields(record: RawRecord) -> bool:
    """A record needs a name and either direct coordinates or a centroid."""
    return record.name is not None and record.position() is not None


def classify(record: RawRecord) -> Tuple[CategoryEnum, Set[TagEnum]]:
    """Classify a raw record into (category, tags)."""
    tags = record.tags or {}
    return classify_category(tags), derive_tags(tags)
