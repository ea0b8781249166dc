# fabexport/rosters.py
"""
Static lookup data for classifying scraped GEM markup.

Hero names are matched exactly; formats are matched case-insensitively
against KNOWN_FORMATS first, then FORMAT_ALIASES.
"""

KNOWN_HEROES = frozenset({
    "Arakni", "Arakni, Huntsman", "Arakni, Marionette", "Arakni, Solitary Confinement", "Arakni, Web of Deceit",
    "Aurora", "Aurora, Shooting Star", "Azalea", "Azalea, Ace in the Hole",
    "Benji, the Piercing Wind", "Betsy", "Betsy, Skin in the Game", "Blaze, Firemind",
    "Boltyn", "Bravo", "Bravo, Showstopper", "Bravo, Star of the Show",
    "Brevant, Civic Protector", "Briar", "Briar, Warden of Thorns",
    "Chane", "Chane, Bound by Shadow", "Cindra", "Cindra, Dracai of Retribution",
    "Dash", "Dash I/O", "Dash, Database", "Dash, Inventor Extraordinaire", "Data Doll MKII",
    "Dorinthea", "Dorinthea Ironsong", "Dorinthea, Quicksilver Prodigy",
    "Dromai", "Dromai, Ash Artist", "Emperor, Dracai of Aesir",
    "Enigma", "Enigma, Ledger of Ancestry", "Enigma, New Moon",
    "Fai", "Fai, Rising Rebellion", "Fang", "Fang, Dracai of Blades",
    "Florian", "Florian, Rotwood Harbinger",
    "Ira, Crimson Haze", "Ira, Scarlet Revenger",
    "Iyslander", "Iyslander, Stormbind",
    "Kano", "Kano, Dracai of Aether",
    "Kassai", "Kassai of the Golden Sand", "Kassai, Cintari Sellsword",
    "Katsu", "Katsu, the Wanderer",
    "Kayo", "Kayo, Armed and Dangerous", "Kayo, Berserker Runt", "Kayo, Strong-arm",
    "Levia", "Levia, Shadowborn Abomination", "Lexi", "Lexi, Livewire",
    "Lyath Goldmane", "Lyath Goldmane, Vile Savant",
    "Maxx Nitro", "Nuu", "Nuu, Alluring Desire",
    "Oldhim", "Oldhim, Grandfather of Eternity",
    "Olympia", "Olympia, Prized Fighter", "Oscilio", "Oscilio, Constella Intelligence",
    "Pleiades", "Pleiades, Superstar",
    "Prism", "Prism, Advent of Thrones", "Prism, Awakener of Sol", "Prism, Sculptor of Arc Light",
    "Rhinar", "Rhinar, Reckless Rampage", "Riptide", "Riptide, Lurker of the Deep",
    "Ser Boltyn, Breaker of Dawn",
    "Taipanis, Dracai of Judgement", "Taylor",
    "Teklovossen", "Teklovossen, Esteemed Magnate",
    "Terra", "Uzuri", "Uzuri, Switchblade",
    "Valda Brightaxe", "Valda, Seismic Impact",
    "Verdance", "Verdance, Thorn of the Rose",
    "Victor Goldmane", "Victor Goldmane, High and Mighty",
    "Viserai", "Viserai, Rune Blood",
    "Vynnset", "Vynnset, Iron Maiden",
    "Zen", "Zen, Tamer of Purpose",
})

UNKNOWN_HERO = "Unknown"

KNOWN_FORMATS = (
    "Classic Constructed",
    "Silver Age",
    "Blitz",
    "Draft",
    "Sealed",
    "Clash",
    "Ultimate Pit Fight",
    "Living Legend",
)

FORMAT_ALIASES = {
    "booster draft": "Draft",
    "sealed deck": "Sealed",
    "living legend": "Living Legend",
}

EVENT_TIERS = {
    "Armory": "casual",
    "On Demand": "casual",
    "Pre-Release": "casual",
    "Skirmish": "competitive",
    "Road to Nationals": "competitive",
    "ProQuest": "competitive",
    "PTI": "competitive",
    "Battle Hardened": "professional",
    "The Calling": "professional",
    "Nationals": "professional",
    "Pro Tour": "professional",
    "Worlds": "professional",
}
