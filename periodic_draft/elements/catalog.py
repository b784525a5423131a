"""
The fixed catalog of 103 element cards.

Cards are referenced everywhere in game state by atomic number; this module
is the only place their printed attributes live.
"""

from dataclasses import dataclass
from typing import Optional

# ── Families ─────────────────────────────────────────────────────────

NONMETAL = "Nonmetal"
NOBLE_GAS = "Noble Gas"
ALKALI_METAL = "Alkali Metal"
ALKALINE_EARTH_METAL = "Alkaline Earth Metal"
METALLOID = "Metalloid"
HALOGEN = "Halogen"
LANTHANIDE = "Lanthanide"
ACTINIDE = "Actinide"
TRANSITION_METAL = "Transition Metal"
METAL = "Metal"

FAMILIES = [
    NONMETAL, NOBLE_GAS, ALKALI_METAL, ALKALINE_EARTH_METAL, METALLOID,
    HALOGEN, LANTHANIDE, ACTINIDE, TRANSITION_METAL, METAL,
]

FULL_DECK_SIZE = 103
MAX_MASS_GROUP = 6


@dataclass(frozen=True)
class Element:
    """Immutable printed data for one card."""

    atomic_number: int
    symbol: str
    name: str
    atomic_mass: float
    family: str
    radioactive: bool = False
    positive_ion: Optional[int] = None
    negative_ion: Optional[int] = None

    @property
    def mass_group(self) -> int:
        return mass_group_for(self.atomic_mass)


def mass_group_for(atomic_mass):
    """Bucket an atomic mass into groups of 50 u, capped at MAX_MASS_GROUP."""
    return min(MAX_MASS_GROUP, int(atomic_mass // 50) + 1)


# ── Periodic Table ───────────────────────────────────────────────────

# (atomic number, symbol, name, standard atomic mass, family)
_TABLE = [
    (1, "H", "Hydrogen", 1.008, NONMETAL),
    (2, "He", "Helium", 4.003, NOBLE_GAS),
    (3, "Li", "Lithium", 6.94, ALKALI_METAL),
    (4, "Be", "Beryllium", 9.012, ALKALINE_EARTH_METAL),
    (5, "B", "Boron", 10.81, METALLOID),
    (6, "C", "Carbon", 12.011, NONMETAL),
    (7, "N", "Nitrogen", 14.007, NONMETAL),
    (8, "O", "Oxygen", 15.999, NONMETAL),
    (9, "F", "Fluorine", 18.998, HALOGEN),
    (10, "Ne", "Neon", 20.180, NOBLE_GAS),
    (11, "Na", "Sodium", 22.990, ALKALI_METAL),
    (12, "Mg", "Magnesium", 24.305, ALKALINE_EARTH_METAL),
    (13, "Al", "Aluminium", 26.982, METAL),
    (14, "Si", "Silicon", 28.085, METALLOID),
    (15, "P", "Phosphorus", 30.974, NONMETAL),
    (16, "S", "Sulfur", 32.06, NONMETAL),
    (17, "Cl", "Chlorine", 35.45, HALOGEN),
    (18, "Ar", "Argon", 39.948, NOBLE_GAS),
    (19, "K", "Potassium", 39.098, ALKALI_METAL),
    (20, "Ca", "Calcium", 40.078, ALKALINE_EARTH_METAL),
    (21, "Sc", "Scandium", 44.956, TRANSITION_METAL),
    (22, "Ti", "Titanium", 47.867, TRANSITION_METAL),
    (23, "V", "Vanadium", 50.942, TRANSITION_METAL),
    (24, "Cr", "Chromium", 51.996, TRANSITION_METAL),
    (25, "Mn", "Manganese", 54.938, TRANSITION_METAL),
    (26, "Fe", "Iron", 55.845, TRANSITION_METAL),
    (27, "Co", "Cobalt", 58.933, TRANSITION_METAL),
    (28, "Ni", "Nickel", 58.693, TRANSITION_METAL),
    (29, "Cu", "Copper", 63.546, TRANSITION_METAL),
    (30, "Zn", "Zinc", 65.38, TRANSITION_METAL),
    (31, "Ga", "Gallium", 69.723, METAL),
    (32, "Ge", "Germanium", 72.630, METALLOID),
    (33, "As", "Arsenic", 74.922, METALLOID),
    (34, "Se", "Selenium", 78.971, NONMETAL),
    (35, "Br", "Bromine", 79.904, HALOGEN),
    (36, "Kr", "Krypton", 83.798, NOBLE_GAS),
    (37, "Rb", "Rubidium", 85.468, ALKALI_METAL),
    (38, "Sr", "Strontium", 87.62, ALKALINE_EARTH_METAL),
    (39, "Y", "Yttrium", 88.906, TRANSITION_METAL),
    (40, "Zr", "Zirconium", 91.224, TRANSITION_METAL),
    (41, "Nb", "Niobium", 92.906, TRANSITION_METAL),
    (42, "Mo", "Molybdenum", 95.95, TRANSITION_METAL),
    (43, "Tc", "Technetium", 98.0, TRANSITION_METAL),
    (44, "Ru", "Ruthenium", 101.07, TRANSITION_METAL),
    (45, "Rh", "Rhodium", 102.91, TRANSITION_METAL),
    (46, "Pd", "Palladium", 106.42, TRANSITION_METAL),
    (47, "Ag", "Silver", 107.87, TRANSITION_METAL),
    (48, "Cd", "Cadmium", 112.41, TRANSITION_METAL),
    (49, "In", "Indium", 114.82, METAL),
    (50, "Sn", "Tin", 118.71, METAL),
    (51, "Sb", "Antimony", 121.76, METALLOID),
    (52, "Te", "Tellurium", 127.60, METALLOID),
    (53, "I", "Iodine", 126.90, HALOGEN),
    (54, "Xe", "Xenon", 131.29, NOBLE_GAS),
    (55, "Cs", "Caesium", 132.91, ALKALI_METAL),
    (56, "Ba", "Barium", 137.33, ALKALINE_EARTH_METAL),
    (57, "La", "Lanthanum", 138.91, LANTHANIDE),
    (58, "Ce", "Cerium", 140.12, LANTHANIDE),
    (59, "Pr", "Praseodymium", 140.91, LANTHANIDE),
    (60, "Nd", "Neodymium", 144.24, LANTHANIDE),
    (61, "Pm", "Promethium", 145.0, LANTHANIDE),
    (62, "Sm", "Samarium", 150.36, LANTHANIDE),
    (63, "Eu", "Europium", 151.96, LANTHANIDE),
    (64, "Gd", "Gadolinium", 157.25, LANTHANIDE),
    (65, "Tb", "Terbium", 158.93, LANTHANIDE),
    (66, "Dy", "Dysprosium", 162.50, LANTHANIDE),
    (67, "Ho", "Holmium", 164.93, LANTHANIDE),
    (68, "Er", "Erbium", 167.26, LANTHANIDE),
    (69, "Tm", "Thulium", 168.93, LANTHANIDE),
    (70, "Yb", "Ytterbium", 173.05, LANTHANIDE),
    (71, "Lu", "Lutetium", 174.97, LANTHANIDE),
    (72, "Hf", "Hafnium", 178.49, TRANSITION_METAL),
    (73, "Ta", "Tantalum", 180.95, TRANSITION_METAL),
    (74, "W", "Tungsten", 183.84, TRANSITION_METAL),
    (75, "Re", "Rhenium", 186.21, TRANSITION_METAL),
    (76, "Os", "Osmium", 190.23, TRANSITION_METAL),
    (77, "Ir", "Iridium", 192.22, TRANSITION_METAL),
    (78, "Pt", "Platinum", 195.08, TRANSITION_METAL),
    (79, "Au", "Gold", 196.97, TRANSITION_METAL),
    (80, "Hg", "Mercury", 200.59, TRANSITION_METAL),
    (81, "Tl", "Thallium", 204.38, METAL),
    (82, "Pb", "Lead", 207.2, METAL),
    (83, "Bi", "Bismuth", 208.98, METAL),
    (84, "Po", "Polonium", 209.0, METAL),
    (85, "At", "Astatine", 210.0, HALOGEN),
    (86, "Rn", "Radon", 222.0, NOBLE_GAS),
    (87, "Fr", "Francium", 223.0, ALKALI_METAL),
    (88, "Ra", "Radium", 226.0, ALKALINE_EARTH_METAL),
    (89, "Ac", "Actinium", 227.0, ACTINIDE),
    (90, "Th", "Thorium", 232.04, ACTINIDE),
    (91, "Pa", "Protactinium", 231.04, ACTINIDE),
    (92, "U", "Uranium", 238.03, ACTINIDE),
    (93, "Np", "Neptunium", 237.0, ACTINIDE),
    (94, "Pu", "Plutonium", 244.0, ACTINIDE),
    (95, "Am", "Americium", 243.0, ACTINIDE),
    (96, "Cm", "Curium", 247.0, ACTINIDE),
    (97, "Bk", "Berkelium", 247.0, ACTINIDE),
    (98, "Cf", "Californium", 251.0, ACTINIDE),
    (99, "Es", "Einsteinium", 252.0, ACTINIDE),
    (100, "Fm", "Fermium", 257.0, ACTINIDE),
    (101, "Md", "Mendelevium", 258.0, ACTINIDE),
    (102, "No", "Nobelium", 259.0, ACTINIDE),
    (103, "Lr", "Lawrencium", 266.0, ACTINIDE),
]

# No stable isotope: technetium, promethium, and everything from polonium up.
RADIOACTIVE = {43, 61} | set(range(84, FULL_DECK_SIZE + 1))

# Most common ion charge, stored as a magnitude. A card carries at most one.
POSITIVE_IONS = {
    1: 1, 3: 1, 4: 2, 11: 1, 12: 2, 13: 3, 19: 1, 20: 2,
    21: 3, 22: 4, 23: 3, 24: 3, 25: 2, 26: 3, 27: 2, 28: 2, 29: 2, 30: 2,
    31: 3, 37: 1, 38: 2, 39: 3, 40: 4, 47: 1, 48: 2, 49: 3, 50: 2,
    55: 1, 56: 2, 57: 3, 78: 2, 79: 1, 80: 2, 81: 1, 82: 2, 83: 3,
    87: 1, 88: 2,
}

NEGATIVE_IONS = {
    7: 3, 8: 2, 9: 1, 15: 3, 16: 2, 17: 1, 34: 2, 35: 1, 52: 2, 53: 1, 85: 1,
}


def _build_catalog():
    catalog = {}
    for number, symbol, name, mass, family in _TABLE:
        catalog[number] = Element(
            atomic_number=number,
            symbol=symbol,
            name=name,
            atomic_mass=mass,
            family=family,
            radioactive=number in RADIOACTIVE,
            positive_ion=POSITIVE_IONS.get(number),
            negative_ion=NEGATIVE_IONS.get(number),
        )
    return catalog


ELEMENTS = _build_catalog()


def get_element(atomic_number):
    """Look up a card; raises KeyError for numbers outside 1..103."""
    try:
        return ELEMENTS[atomic_number]
    except KeyError:
        raise KeyError(f"No element with atomic number {atomic_number}")


def elements_for(atomic_numbers):
    return [get_element(n) for n in atomic_numbers]
