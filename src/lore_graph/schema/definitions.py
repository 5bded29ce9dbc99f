"""Resource declarations for the Warhammer 40,000 lore dataset.

Order matters: it is the catalog order and the order backlink groups are
visited during traversal.
"""

from ..models.schema import (
    AttributeFilter,
    FieldSpec,
    KeywordsFilter,
    RelationFilter,
    RelationSpec,
    TypeDescriptor,
)

BASE_FIELDS = [
    FieldSpec(name="id", type="number", description="Numeric identifier."),
    FieldSpec(name="slug", type="string", description="Public slug."),
    FieldSpec(name="name", type="string", description="Display name."),
    FieldSpec(name="summary", type="string", description="One-line summary."),
    FieldSpec(name="status", type="string", description="Lifecycle status."),
    FieldSpec(name="keywords", type="string[]", description="Free-form tags."),
]


def _fields(*extra: FieldSpec) -> list[FieldSpec]:
    return [*BASE_FIELDS, *extra]


def _status() -> AttributeFilter:
    return AttributeFilter(field="status", label="Status")


ERAS = TypeDescriptor(
    name="eras",
    label="Eras",
    description="Chronological periods for timelines and historical filters.",
    default_sort=["yearOrder", "name"],
    sort_fields=["name", "status", "yearOrder"],
    fields=_fields(
        FieldSpec(name="yearLabel", description="Imperial dating label."),
        FieldSpec(name="yearOrder", type="number", description="Sortable year."),
    ),
    filters={"status": _status(), "keywords": KeywordsFilter()},
    display_fields=["yearLabel"],
    sample_queries=["/eras?sort=yearOrder", "/eras?filter[status]=active"],
)

RACES = TypeDescriptor(
    name="races",
    label="Races",
    description="Species of the galaxy, the base layer for filters and relations.",
    sort_fields=["name", "status", "alignment"],
    fields=_fields(FieldSpec(name="alignment", description="Broad allegiance.")),
    filters={
        "status": _status(),
        "alignment": AttributeFilter(field="alignment", label="Alignment"),
        "keywords": KeywordsFilter(),
    },
    display_fields=["alignment"],
    sample_queries=["/races?sort=name", "/races?filter[alignment]=xenos"],
)

SEGMENTUMS = TypeDescriptor(
    name="segmentums",
    label="Segmentums",
    description="The great administrative divisions of the Imperium.",
    sort_fields=["name", "status"],
    fields=_fields(),
    filters={"status": _status(), "keywords": KeywordsFilter()},
    sample_queries=["/segmentums?sort=name"],
)

STAR_SYSTEMS = TypeDescriptor(
    name="star-systems",
    label="Star systems",
    description="Systems grouping planets under a segmentum.",
    sort_fields=["name", "status"],
    search_fields=["name", "summary", "description", "keywords"],
    fields=_fields(
        FieldSpec(name="segmentumId", type="number|null", description="Owning segmentum."),
        FieldSpec(name="planetIds", type="number[]", description="Planets in the system."),
        FieldSpec(name="eraId", type="number|null", description="Era of record."),
    ),
    filters={
        "status": _status(),
        "keywords": KeywordsFilter(),
        "segmentum": RelationFilter(relation="segmentum", label="Segmentum"),
        "era": RelationFilter(relation="era", label="Era"),
    },
    relations=[
        RelationSpec(name="segmentum", target="segmentums", local_field="segmentumId", label="Segmentum"),
        RelationSpec(name="planets", target="planets", local_field="planetIds", many=True, label="Planets"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
    ],
    sample_queries=["/star-systems?include=planets,era&sort=name"],
)

PLANETS = TypeDescriptor(
    name="planets",
    label="Planets",
    description="Worlds for homeworlds, sieges and campaigns.",
    sort_fields=["name", "status", "type", "sector"],
    search_fields=["name", "summary", "description", "sector", "keywords"],
    fields=_fields(
        FieldSpec(name="type", description="World category."),
        FieldSpec(name="sector", description="Sector or region."),
        FieldSpec(name="eraId", type="number|null", description="Era of record."),
    ),
    filters={
        "status": _status(),
        "type": AttributeFilter(field="type", label="World type"),
        "era": RelationFilter(relation="era", label="Era"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
    ],
    display_fields=["type", "sector"],
    sample_queries=["/planets?include=era&sort=name", "/planets?filter[type]=hive-world,fortress-world"],
)

FACTIONS = TypeDescriptor(
    name="factions",
    label="Factions",
    description="Armies and empires, the main entry point for exploration.",
    sort_fields=["name", "status", "alignment", "powerLevel"],
    search_fields=["name", "summary", "description", "keywords", "alignment"],
    fields=_fields(
        FieldSpec(name="alignment", description="Political pole."),
        FieldSpec(name="powerLevel", type="number", description="Relative strength."),
        FieldSpec(name="parentFactionId", type="number|null", description="Parent faction."),
        FieldSpec(name="raceIds", type="number[]", description="Races, primary first."),
        FieldSpec(name="leaderIds", type="number[]", description="Leading characters."),
        FieldSpec(name="homeworldId", type="number|null", description="Homeworld planet."),
        FieldSpec(name="eraId", type="number|null", description="Era of record."),
    ),
    filters={
        "alignment": AttributeFilter(field="alignment", label="Alignment"),
        "status": _status(),
        "race": RelationFilter(relation="races", label="Race"),
        "era": RelationFilter(relation="era", label="Era"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="races", target="races", local_field="raceIds", many=True, label="Races", order="stored"),
        RelationSpec(name="leaders", target="characters", local_field="leaderIds", many=True, label="Leaders"),
        RelationSpec(name="homeworld", target="planets", local_field="homeworldId", label="Homeworld"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
        RelationSpec(name="parentFaction", target="factions", local_field="parentFactionId", label="Parent faction"),
    ],
    display_fields=["alignment", "powerLevel"],
    sample_queries=[
        "/factions?include=leaders,races,homeworld&sort=-powerLevel,name",
        "/factions?filter[alignment]=imperium",
    ],
)

ORGANIZATIONS = TypeDescriptor(
    name="organizations",
    label="Organizations",
    description="Institutions that cut across factions.",
    default_sort=["-influenceLevel", "name"],
    sort_fields=["name", "status", "type", "influenceLevel"],
    search_fields=["name", "summary", "description", "type", "keywords"],
    fields=_fields(
        FieldSpec(name="type", description="Kind of institution."),
        FieldSpec(name="influenceLevel", type="number", description="Relative influence."),
        FieldSpec(name="factionIds", type="number[]", description="Affiliated factions."),
        FieldSpec(name="leaderIds", type="number[]", description="Leading characters."),
        FieldSpec(name="homeworldId", type="number|null", description="Seat of power."),
        FieldSpec(name="eraId", type="number|null", description="Era of record."),
    ),
    filters={
        "status": _status(),
        "type": AttributeFilter(field="type", label="Type"),
        "factions": RelationFilter(relation="factions", label="Factions"),
        "era": RelationFilter(relation="era", label="Era"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="factions", target="factions", local_field="factionIds", many=True, label="Factions"),
        RelationSpec(name="leaders", target="characters", local_field="leaderIds", many=True, label="Leaders"),
        RelationSpec(name="homeworld", target="planets", local_field="homeworldId", label="Seat of power"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
    ],
    display_fields=["type", "influenceLevel"],
    sample_queries=["/organizations?include=factions,leaders&sort=-influenceLevel"],
)

CHARACTERS = TypeDescriptor(
    name="characters",
    label="Characters",
    description="Heroes and villains, the richest resource for cards and detail pages.",
    default_sort=["-powerLevel", "name"],
    sort_fields=["name", "status", "alignment", "powerLevel"],
    search_fields=["name", "summary", "description", "titles", "keywords", "alignment"],
    fields=_fields(
        FieldSpec(name="alignment", description="Allegiance."),
        FieldSpec(name="powerLevel", type="number", description="Relative strength."),
        FieldSpec(name="titles", type="string[]", description="Titles, most important first."),
        FieldSpec(name="factionId", type="number|null", description="Faction."),
        FieldSpec(name="raceId", type="number|null", description="Race."),
        FieldSpec(name="homeworldId", type="number|null", description="Homeworld planet."),
        FieldSpec(name="eraId", type="number|null", description="Era of record."),
        FieldSpec(name="eventIds", type="number[]", description="Events taken part in."),
    ),
    filters={
        "faction": RelationFilter(relation="faction", label="Faction"),
        "race": RelationFilter(relation="race", label="Race"),
        "era": RelationFilter(relation="era", label="Era"),
        "homeworld": RelationFilter(relation="homeworld", label="Homeworld"),
        "keywords": KeywordsFilter(),
        "alignment": AttributeFilter(field="alignment", label="Alignment"),
        "status": _status(),
    },
    relations=[
        RelationSpec(name="faction", target="factions", local_field="factionId", label="Faction"),
        RelationSpec(name="race", target="races", local_field="raceId", label="Race"),
        RelationSpec(name="homeworld", target="planets", local_field="homeworldId", label="Homeworld"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
        RelationSpec(name="events", target="events", local_field="eventIds", many=True, label="Events"),
    ],
    display_fields=["alignment", "powerLevel"],
    sample_queries=[
        "/characters?filter[faction]=ultramarines&include=faction,race,homeworld,events",
        "/characters?search=primarch&sort=-powerLevel,name",
    ],
)

EVENTS = TypeDescriptor(
    name="events",
    label="Events",
    description="Historical and modern conflicts for timelines and dashboards.",
    default_sort=["-yearOrder", "name"],
    sort_fields=["name", "status", "yearOrder"],
    search_fields=["name", "summary", "description", "keywords", "yearLabel"],
    fields=_fields(
        FieldSpec(name="yearLabel", description="Imperial dating label."),
        FieldSpec(name="yearOrder", type="number", description="Sortable year."),
        FieldSpec(name="eraId", type="number|null", description="Era."),
        FieldSpec(name="planetIds", type="number[]", description="Planets involved."),
        FieldSpec(name="factionIds", type="number[]", description="Factions involved."),
        FieldSpec(name="characterIds", type="number[]", description="Characters involved."),
    ),
    filters={
        "status": _status(),
        "era": RelationFilter(relation="era", label="Era"),
        "factions": RelationFilter(relation="factions", label="Factions"),
        "planets": RelationFilter(relation="planets", label="Planets"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
        RelationSpec(name="planets", target="planets", local_field="planetIds", many=True, label="Planets"),
        RelationSpec(name="factions", target="factions", local_field="factionIds", many=True, label="Factions"),
        RelationSpec(name="characters", target="characters", local_field="characterIds", many=True, label="Characters"),
    ],
    display_fields=["yearLabel"],
    sample_queries=[
        "/events?include=era,planets,factions,characters&sort=-yearOrder,name",
        "/events?filter[era]=indomitus-era",
    ],
)

CAMPAIGNS = TypeDescriptor(
    name="campaigns",
    label="Campaigns",
    description="Multi-front wars tying planets, factions and institutions together.",
    default_sort=["-yearOrder", "name"],
    sort_fields=["name", "status", "yearOrder"],
    search_fields=["name", "summary", "description", "keywords", "yearLabel"],
    fields=_fields(
        FieldSpec(name="yearLabel", description="Imperial dating label."),
        FieldSpec(name="yearOrder", type="number", description="Sortable year."),
        FieldSpec(name="eraId", type="number|null", description="Era."),
        FieldSpec(name="planetIds", type="number[]", description="Planets fought over."),
        FieldSpec(name="factionIds", type="number[]", description="Factions involved."),
        FieldSpec(name="characterIds", type="number[]", description="Commanders."),
        FieldSpec(name="organizationIds", type="number[]", description="Institutions involved."),
        FieldSpec(name="battlefieldIds", type="number[]", description="Battlefields."),
    ),
    filters={
        "status": _status(),
        "era": RelationFilter(relation="era", label="Era"),
        "factions": RelationFilter(relation="factions", label="Factions"),
        "planets": RelationFilter(relation="planets", label="Planets"),
        "organizations": RelationFilter(relation="organizations", label="Organizations"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
        RelationSpec(name="planets", target="planets", local_field="planetIds", many=True, label="Planets"),
        RelationSpec(name="factions", target="factions", local_field="factionIds", many=True, label="Factions"),
        RelationSpec(name="characters", target="characters", local_field="characterIds", many=True, label="Characters"),
        RelationSpec(
            name="organizations", target="organizations", local_field="organizationIds", many=True,
            label="Organizations",
        ),
        RelationSpec(
            name="battlefields", target="battlefields", local_field="battlefieldIds", many=True,
            label="Battlefields",
        ),
    ],
    display_fields=["yearLabel"],
    sample_queries=["/campaigns/plague-wars?include=planets,battlefields"],
)

BATTLEFIELDS = TypeDescriptor(
    name="battlefields",
    label="Battlefields",
    description="Specific war zones with a tactical intensity rating.",
    default_sort=["-intensityLevel", "name"],
    sort_fields=["name", "status", "intensityLevel"],
    search_fields=["name", "summary", "description", "terrain", "keywords"],
    fields=_fields(
        FieldSpec(name="terrain", description="Dominant terrain."),
        FieldSpec(name="intensityLevel", type="number", description="Tactical intensity."),
        FieldSpec(name="planetId", type="number|null", description="Planet."),
        FieldSpec(name="starSystemId", type="number|null", description="Star system."),
        FieldSpec(name="eraId", type="number|null", description="Era."),
        FieldSpec(name="factionIds", type="number[]", description="Factions engaged."),
        FieldSpec(name="characterIds", type="number[]", description="Characters present."),
        FieldSpec(name="campaignIds", type="number[]", description="Campaigns."),
    ),
    filters={
        "status": _status(),
        "terrain": AttributeFilter(field="terrain", label="Terrain"),
        "planet": RelationFilter(relation="planet", label="Planet"),
        "starSystem": RelationFilter(relation="starSystem", label="Star system"),
        "era": RelationFilter(relation="era", label="Era"),
        "factions": RelationFilter(relation="factions", label="Factions"),
        "characters": RelationFilter(relation="characters", label="Characters"),
        "campaigns": RelationFilter(relation="campaigns", label="Campaigns"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="planet", target="planets", local_field="planetId", label="Planet"),
        RelationSpec(name="starSystem", target="star-systems", local_field="starSystemId", label="Star system"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
        RelationSpec(name="factions", target="factions", local_field="factionIds", many=True, label="Factions"),
        RelationSpec(name="characters", target="characters", local_field="characterIds", many=True, label="Characters"),
        RelationSpec(name="campaigns", target="campaigns", local_field="campaignIds", many=True, label="Campaigns"),
    ],
    display_fields=["terrain", "intensityLevel"],
    sample_queries=[
        "/battlefields?filter[campaigns]=plague-wars&include=planet,starSystem,factions&sort=-intensityLevel,name",
    ],
)

RELICS = TypeDescriptor(
    name="relics",
    label="Relics",
    description="Legendary wargear with a bearer and an origin.",
    sort_fields=["name", "status", "type"],
    search_fields=["name", "summary", "description", "type", "keywords"],
    fields=_fields(
        FieldSpec(name="type", description="Kind of relic."),
        FieldSpec(name="factionId", type="number|null", description="Owning faction."),
        FieldSpec(name="bearerId", type="number|null", description="Current or last bearer."),
        FieldSpec(name="originPlanetId", type="number|null", description="Planet of origin."),
        FieldSpec(name="eraId", type="number|null", description="Era of forging."),
    ),
    filters={
        "status": _status(),
        "type": AttributeFilter(field="type", label="Type"),
        "faction": RelationFilter(relation="faction", label="Faction"),
        "bearer": RelationFilter(relation="bearer", label="Bearer"),
        "era": RelationFilter(relation="era", label="Era"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="faction", target="factions", local_field="factionId", label="Faction"),
        RelationSpec(name="bearer", target="characters", local_field="bearerId", label="Bearer"),
        RelationSpec(name="originPlanet", target="planets", local_field="originPlanetId", label="Origin planet"),
        RelationSpec(name="era", target="eras", local_field="eraId", label="Era"),
    ],
    display_fields=["type"],
    sample_queries=["/relics?include=faction,bearer,originPlanet,era"],
)

UNITS = TypeDescriptor(
    name="units",
    label="Units",
    description="Battlefield formations and their wargear.",
    default_sort=["-powerLevel", "name"],
    sort_fields=["name", "status", "role", "powerLevel"],
    search_fields=["name", "summary", "description", "role", "keywords"],
    fields=_fields(
        FieldSpec(name="role", description="Battlefield role."),
        FieldSpec(name="powerLevel", type="number", description="Relative strength."),
        FieldSpec(name="factionIds", type="number[]", description="Fielding factions."),
        FieldSpec(name="weaponIds", type="number[]", description="Standard wargear."),
    ),
    filters={
        "status": _status(),
        "role": AttributeFilter(field="role", label="Role"),
        "factions": RelationFilter(relation="factions", label="Factions"),
        "weapons": RelationFilter(relation="weapons", label="Weapons"),
        "keywords": KeywordsFilter(),
    },
    relations=[
        RelationSpec(name="factions", target="factions", local_field="factionIds", many=True, label="Factions"),
        RelationSpec(name="weapons", target="weapons", local_field="weaponIds", many=True, label="Weapons"),
    ],
    display_fields=["role", "powerLevel"],
    sample_queries=["/units?filter[factions]=ultramarines&include=weapons"],
)

WEAPONS = TypeDescriptor(
    name="weapons",
    label="Weapons",
    description="Wargear patterns shared between units.",
    sort_fields=["name", "status", "type"],
    search_fields=["name", "summary", "description", "type", "keywords"],
    fields=_fields(FieldSpec(name="type", description="Weapon class.")),
    filters={
        "status": _status(),
        "type": AttributeFilter(field="type", label="Type"),
        "keywords": KeywordsFilter(),
    },
    display_fields=["type"],
    sample_queries=["/weapons?filter[type]=melee"],
)

RESOURCE_DEFINITIONS: list[TypeDescriptor] = [
    ERAS,
    RACES,
    SEGMENTUMS,
    STAR_SYSTEMS,
    PLANETS,
    FACTIONS,
    ORGANIZATIONS,
    CHARACTERS,
    EVENTS,
    CAMPAIGNS,
    BATTLEFIELDS,
    RELICS,
    UNITS,
    WEAPONS,
]
