"""Species filtering policy: hand-maintained exclusion lists kept as data."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, field_validator


DEFAULT_ICHNOGENERA = [
    "Amblydactylus",
    "Anatopus",
    "Anchisauripus",
    "Anomoepus",
    "Argoides",
    "Argozoum",
    "Asianopodus",
    "Breviparopus",
    "Brontopodus",
    "Brontopus",
    "Caririchnium",
    "Ceratopsipes",
    "Chirotherium",
    "Deltapodus",
    "Dinosauropodes",
    "Dinosauropodus",
    "Eosauropus",
    "Eubrontes",
    "Evazoum",
    "Gigandipus",
    "Grallator",
    "Gypsichnites",
    "Hadrosaurichnus",
    "Iguanodontipus",
    "Irenesauripus",
    "Jiayinosauripus",
    "Kayentapus",
    "Lavinipes",
    "Limnopus",
    "Magnoavipes",
    "Megalosauripus",
    "Moyenisauropus",
    "Otozoum",
    "Parabrontopodus",
    "Platypterna",
    "Rotundichnus",
    "Sauropodichnus",
    "Siamopodus",
    "Stegopodus",
    "Tetrapodosaurus",
    "Tetrasauropus",
    "Therangospodus",
    "Thinopus",
    "Trihamus",
    "Tyrannosauripus",
    "Wintonopus",
]

DEFAULT_ICHNO_SUFFIXES = ["pes", "manus", "podus", "ichnites", "ichnus"]

DEFAULT_MODERN_BIRD_FAMILIES = [
    "Accipitridae", "Aegithalidae", "Alaudidae", "Alcedinidae", "Alcidae", "Anatidae",
    "Anhimidae", "Anhingidae", "Apodidae", "Apterygidae", "Ardeidae", "Artamidae",
    "Bombycillidae", "Bucerotidae", "Burhinidae", "Caprimulgidae", "Cardinalidae",
    "Cathartidae", "Certhiidae", "Charadriidae", "Ciconiidae", "Cinclidae", "Columbidae",
    "Coraciidae", "Corvidae", "Cuculidae", "Diomedeidae", "Emberizidae", "Falconidae",
    "Fringillidae", "Gaviidae", "Glareolidae", "Gruidae", "Haematopodidae", "Hirundinidae",
    "Hydrobatidae", "Icteridae", "Indicatoridae", "Laniidae", "Laridae", "Maluridae",
    "Meropidae", "Mimidae", "Motacillidae", "Muscicapidae", "Nectariniidae", "Oriolidae",
    "Pandionidae", "Paridae", "Parulidae", "Pelecanidae", "Phalacrocoracidae", "Phasianidae",
    "Phoenicopteridae", "Picidae", "Podicipedidae", "Procellariidae", "Psittacidae",
    "Ptilonorhynchidae", "Rallidae", "Recurvirostridae", "Regulidae", "Remizidae",
    "Sagittariidae", "Scolopacidae", "Sittidae", "Stercorariidae", "Strigidae", "Sturnidae",
    "Sulidae", "Sylviidae", "Threskiornithidae", "Timaliidae", "Trochilidae",
    "Troglodytidae", "Turdidae", "Tytonidae", "Upupidae", "Vireonidae", "Zosteropidae",
]


class FilterPolicy(BaseModel):
    """Exclusion lists used to drop trace fossils, eggs and extant birds."""

    lists_version: str = Field(
        default="2024-10-01",
        min_length=1,
        description="Version tag of the exclusion lists; bump when any list changes.",
    )
    ichnogenera: List[str] = Field(default_factory=lambda: list(DEFAULT_ICHNOGENERA))
    ichno_suffixes: List[str] = Field(default_factory=lambda: list(DEFAULT_ICHNO_SUFFIXES))
    egg_marker: str = Field(default="oolithus", min_length=1)
    modern_bird_families: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MODERN_BIRD_FAMILIES)
    )

    @field_validator("ichnogenera", "modern_bird_families")
    @classmethod
    def _strip_names(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(name.strip() for name in value if name and name.strip()))

    @field_validator("ichno_suffixes")
    @classmethod
    def _normalize_suffixes(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(s.strip().lower() for s in value if s and s.strip()))

    @field_validator("egg_marker")
    @classmethod
    def _lower_marker(cls, value: str) -> str:
        return value.strip().lower()
