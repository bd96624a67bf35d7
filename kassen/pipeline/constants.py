"""Vanilla raid data: instances, encounter body parts and known adds."""

VANILLA_ZONES: dict[str, list[str]] = {
    "Molten Core": [
        "Lucifron",
        "Magmadar",
        "Gehennas",
        "Garr",
        "Baron Geddon",
        "Shazzrah",
        "Sulfuron Harbinger",
        "Golemagg the Incinerator",
        "Majordomo Executus",
        "Ragnaros",
    ],
    "Onyxia's Lair": [
        "Onyxia",
    ],
    "Blackwing Lair": [
        "Razorgore the Untamed",
        "Vaelastrasz the Corrupt",
        "Broodlord Lashlayer",
        "Firemaw",
        "Ebonroc",
        "Flamegor",
        "Chromaggus",
        "Nefarian",
    ],
    "Zul'Gurub": [
        "High Priestess Jeklik",
        "High Priest Venoxis",
        "High Priestess Mar'li",
        "Bloodlord Mandokir",
        "Edge of Madness",
        "High Priest Thekal",
        "Gahz'ranka",
        "High Priestess Arlokk",
        "Jin'do the Hexxer",
        "Hakkar",
    ],
    "Ruins of Ahn'Qiraj": [
        "Kurinnaxx",
        "General Rajaxx",
        "Moam",
        "Buru the Gorger",
        "Ayamiss the Hunter",
        "Ossirian the Unscarred",
    ],
    "Ahn'Qiraj Temple": [
        "The Prophet Skeram",
        "The Bug Family",
        "Battleguard Sartura",
        "Fankriss the Unyielding",
        "Viscidus",
        "Princess Huhuran",
        "Twin Emperors",
        "Ouro",
        "C'Thun",
    ],
    "Naxxramas": [
        "Anub'Rekhan",
        "Grand Widow Faerlina",
        "Maexxna",
        "Noth the Plaguebringer",
        "Heigan the Unclean",
        "Loatheb",
        "Instructor Razuvious",
        "Gothik the Harvester",
        "The Four Horsemen",
        "Patchwerk",
        "Grobbulus",
        "Gluth",
        "Thaddius",
        "Sapphiron",
        "Kel'Thuzad",
    ],
}

BOSS_INSTANCES: dict[str, str] = {
    boss: instance
    for instance, bosses in VANILLA_ZONES.items()
    for boss in bosses
}

# Encounters whose units carry names other than the encounter name.
BOSS_PARTS: dict[str, tuple[str, ...]] = {
    "Majordomo Executus": ("Majordomo Executus", "Flamewaker Healer", "Flamewaker Elite"),
    "Razorgore the Untamed": ("Razorgore the Untamed", "Grethok the Controller"),
    "Edge of Madness": ("Gri'lek", "Hazza'rah", "Renataki", "Wushoolay"),
    "The Bug Family": ("Lord Kri", "Princess Yauj", "Vem"),
    "Twin Emperors": ("Emperor Vek'lor", "Emperor Vek'nilash"),
    "C'Thun": ("Eye of C'Thun", "C'Thun"),
    "The Four Horsemen": (
        "Highlord Mograine",
        "Thane Korth'azz",
        "Lady Blaumeux",
        "Sir Zeliek",
    ),
    "Thaddius": ("Thaddius", "Stalagg", "Feugen"),
}

# Encounters where the boss unit is absent for long stretches; adds stand
# in for the boss when judging activity.
DISAPPEARING_BOSSES: frozenset[str] = frozenset({
    "Razorgore the Untamed",
    "Ragnaros",
    "Nefarian",
    "Ouro",
    "Gothik the Harvester",
})

BOSS_ADDS: dict[str, tuple[str, ...]] = {
    "Razorgore the Untamed": (
        "Blackwing Legionnaire",
        "Blackwing Mage",
        "Death Talon Dragonspawn",
        "Blackwing Guardsman",
    ),
    "Ragnaros": ("Son of Flame",),
    "Nefarian": (
        "Lord Victor Nefarius",
        "Black Drakonid",
        "Red Drakonid",
        "Blue Drakonid",
        "Green Drakonid",
        "Bronze Drakonid",
        "Chromatic Drakonid",
    ),
    "Ouro": ("Dirt Mound", "Ouro Scarab"),
    "Gothik the Harvester": (
        "Unrelenting Trainee",
        "Unrelenting Death Knight",
        "Unrelenting Rider",
        "Spectral Trainee",
        "Spectral Death Knight",
        "Spectral Rider",
        "Spectral Horse",
    ),
}
