from app.models.places import CategoryEnum, RawRecord, TagEnum
from app.utils.classifier import (
    CATEGORY_RULES,
    MatchCondition,
    classify,
    classify_category,
    conditions_for,
    derive_tags,
    has_mandatory_fields,
)


def _record(tags, lat=11.0, lon=78.0, center=None):
    return RawRecord(source="overpass", native_id="node-1", tags=tags, lat=lat, lon=lon, center=center)


def test_category_order_is_declared_constant():
    order = [category for category, _ in CATEGORY_RULES]
    assert order == [
        CategoryEnum.TEMPLE,
        CategoryEnum.BEACH,
        CategoryEnum.PEAK,
        CategoryEnum.CASTLE,
        CategoryEnum.PARK,
        CategoryEnum.WILDLIFE,
        CategoryEnum.WATERFALL,
        CategoryEnum.MUSEUM,
        CategoryEnum.VILLAGE,
    ]


def test_place_of_worship_is_temple_with_culture_tag():
    category, tags = classify(_record({"name": "Meenakshi Amman", "amenity": "place_of_worship"}))
    assert category == CategoryEnum.TEMPLE
    assert TagEnum.CULTURE in tags


def test_first_match_wins_over_later_category():
    tags = {"name": "Fort Hill", "natural": "peak", "historic": "castle"}
    assert classify_category(tags) == CategoryEnum.PEAK


def test_first_match_does_not_depend_on_tag_insertion_order():
    tags = {"historic": "castle", "name": "Fort Hill", "natural": "peak"}
    assert classify_category(tags) == CategoryEnum.PEAK


def test_alternation_pattern_matches_each_alternative():
    assert classify_category({"leisure": "garden"}) == CategoryEnum.PARK
    assert classify_category({"leisure": "park"}) == CategoryEnum.PARK
    assert classify_category({"leisure": "parking"}) == CategoryEnum.OTHER


def test_unmatched_record_is_other():
    assert classify_category({"name": "Bus Stand", "amenity": "bus_station"}) == CategoryEnum.OTHER
    assert classify_category({}) == CategoryEnum.OTHER


def test_tags_are_independent_of_category():
    category, tags = classify(_record({"name": "Elephant Camp", "attraction": "animal"}))
    assert category == CategoryEnum.OTHER
    assert tags == {TagEnum.WILDLIFE}


def test_tags_collect_multiple_and_deduplicate():
    tags = derive_tags(
        {
            "tourism": "museum",
            "historic": "building",
            "heritage": "2",
            "natural": "beach",
            "highway": "beach",
        }
    )
    assert tags == {TagEnum.HISTORY, TagEnum.RELAXATION}


def test_wildcard_tag_matches_any_value():
    assert derive_tags({"sport": "cricket"}) == {TagEnum.RECREATION}
    assert derive_tags({"historic": "anything"}) == {TagEnum.HISTORY}


def test_match_condition_wildcard_and_missing_key():
    condition = MatchCondition("historic", "*")
    assert condition.matches({"historic": "fort"})
    assert not condition.matches({"tourism": "museum"})


def test_conditions_for_single_category_and_all():
    temple_conditions = conditions_for(CategoryEnum.TEMPLE)
    assert MatchCondition("amenity", "place_of_worship") in temple_conditions
    assert all(c.key != "natural" for c in temple_conditions)

    every = conditions_for(None)
    assert len(every) == sum(len(conditions) for _, conditions in CATEGORY_RULES)
    assert conditions_for(CategoryEnum.OTHER) == every


def test_mandatory_fields():
    assert has_mandatory_fields(_record({"name": "Ooty"}))
    assert has_mandatory_fields(_record({"name": "Ooty"}, lat=None, lon=None, center={"lat": 11.4, "lon": 76.7}))
    assert not has_mandatory_fields(_record({"name": "  "}))
    assert not has_mandatory_fields(_record({}))
    assert not has_mandatory_fields(_record({"name": "Nowhere"}, lat=None, lon=None))
